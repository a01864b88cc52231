# Path: grc_risk/models.py

from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

db = SQLAlchemy()


def risk_level_for(score):
    """
    Severity band for a risk score (probability * impact).
    critical >= 20, high >= 12, medium >= 6, otherwise low.
    """
    if score >= 20:
        return 'critical'
    elif score >= 12:
        return 'high'
    elif score >= 6:
        return 'medium'
    return 'low'


class Risk(db.Model):
    __tablename__ = 'risks'

    id = db.Column(db.Integer, primary_key=True)
    risk_code = db.Column(db.String(50), unique=True, nullable=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True)

    probability = db.Column(db.Integer, nullable=False, default=1)
    impact = db.Column(db.Integer, nullable=False, default=1)

    owner = db.Column(db.String(100), nullable=True)
    status = db.Column(db.String(50), nullable=False, default='active')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    asset_links = db.relationship('RiskAsset', back_populates='risk', lazy=True,
                                  cascade='all, delete-orphan')

    @property
    def risk_score(self):
        return int(self.probability) * int(self.impact)

    def calculate_risk_level(self):
        return risk_level_for(self.risk_score)

    def to_dict(self):
        data = {c.name: getattr(self, c.name) for c in self.__table__.columns}
        data['risk_score'] = self.risk_score
        data['risk_level'] = self.calculate_risk_level()
        return data


class Asset(db.Model):
    __tablename__ = 'assets'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    asset_type = db.Column(db.String(100), nullable=True)
    # critical / high / medium / low / minimal
    criticality = db.Column(db.String(20), nullable=True, default='medium')
    status = db.Column(db.String(20), nullable=False, default='active')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    risk_links = db.relationship('RiskAsset', back_populates='asset', lazy=True,
                                 cascade='all, delete-orphan')

    def to_dict(self):
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


class RiskAsset(db.Model):
    __tablename__ = 'risk_assets'

    risk_id = db.Column(db.Integer, db.ForeignKey('risks.id'), primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id'), primary_key=True)
    impact_weight = db.Column(db.Float, nullable=False, default=1.0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    risk = db.relationship('Risk', back_populates='asset_links')
    asset = db.relationship('Asset', back_populates='risk_links')

    def to_dict(self):
        return {
            'risk_id': self.risk_id,
            'asset_id': self.asset_id,
            'impact_weight': self.impact_weight,
        }
