from grc_risk import create_app
from grc_risk.models import db

app = create_app()

# =============================================================================
# Main Execution
# =============================================================================
if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    app.run(debug=True, port=5001)
