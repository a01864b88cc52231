# Path: grc_risk/__init__.py
import sys

from flask import Flask
from loguru import logger

from .models import db


def configure_logging(app):
    logger.remove()
    logger.add(sys.stderr, level=app.config['LOG_LEVEL'],
               format="<green>{time:HH:mm:ss}</green> | <level>{level:<8}</level> | {message}",
               colorize=True)
    if app.config.get('LOG_FILE'):
        logger.add(app.config['LOG_FILE'], level="DEBUG", rotation="10 MB",
                   format="{time} | {level} | {message}")


def create_app(config_object='grc_risk.config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)
    db.init_app(app)

    from .routes import main_bp
    app.register_blueprint(main_bp)

    from .cli import register_commands
    register_commands(app)

    return app
