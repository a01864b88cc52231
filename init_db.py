from loguru import logger

from grc_risk import create_app
from grc_risk.models import db, Risk, Asset, RiskAsset

app = create_app()

# =============================================================================
# Demo Data
# =============================================================================
ASSETS = [
    {'name': 'Customer Database', 'asset_type': 'database', 'criticality': 'critical'},
    {'name': 'Payment Gateway', 'asset_type': 'application', 'criticality': 'critical'},
    {'name': 'Core Banking API', 'asset_type': 'application', 'criticality': 'critical'},
    {'name': 'HR Portal', 'asset_type': 'application', 'criticality': 'high'},
    {'name': 'Internal Wiki', 'asset_type': 'application', 'criticality': 'low'},
    {'name': 'Legacy File Server', 'asset_type': 'server', 'criticality': 'critical', 'status': 'inactive'},
]

RISKS = [
    {'risk_code': 'RISK_0001', 'title': 'Data breach of customer records', 'category': 'Security',
     'probability': 2, 'impact': 3, 'status': 'active'},
    {'risk_code': 'RISK_0002', 'title': 'Payment processing outage', 'category': 'Operational',
     'probability': 3, 'impact': 2, 'status': 'monitoring'},
    {'risk_code': 'RISK_0003', 'title': 'Wiki content loss', 'category': 'Operational',
     'probability': 5, 'impact': 5, 'status': 'active'},
    {'risk_code': 'RISK_0004', 'title': 'Unpatched legacy server', 'category': 'Security',
     'probability': 2, 'impact': 2, 'status': 'pending'},
]

# (risk_code, asset name, impact_weight)
LINKS = [
    ('RISK_0001', 'Customer Database', 1.0),
    ('RISK_0002', 'Customer Database', 1.0),
    ('RISK_0002', 'Payment Gateway', 1.5),
    ('RISK_0002', 'Core Banking API', 1.0),
    ('RISK_0003', 'Internal Wiki', 0.5),
    ('RISK_0004', 'Legacy File Server', 1.0),
]


# =============================================================================
# Database Initialization Function
# =============================================================================
def initialize_database():
    with app.app_context():
        logger.info("Starting database initialization...")

        db.drop_all()
        logger.info("All tables dropped successfully.")
        db.create_all()
        logger.info("All tables recreated successfully.")

        assets = {}
        for asset_data in ASSETS:
            asset = Asset(**asset_data)
            db.session.add(asset)
            assets[asset.name] = asset

        risks = {}
        for risk_data in RISKS:
            risk = Risk(**risk_data)
            db.session.add(risk)
            risks[risk.risk_code] = risk
        db.session.flush()
        logger.info("Assets and risks committed.")

        for risk_code, asset_name, weight in LINKS:
            db.session.add(RiskAsset(risk_id=risks[risk_code].id,
                                     asset_id=assets[asset_name].id,
                                     impact_weight=weight))
        db.session.commit()
        logger.info("Risk-asset links committed.")

        logger.info("Database initialization complete.")


# =============================================================================
# Main Execution
# =============================================================================
if __name__ == '__main__':
    initialize_database()
