"""
Pytest configuration and fixtures for the reclassification tests.
"""
import pytest

from grc_risk import create_app
from grc_risk.exceptions import StorageError
from grc_risk.models import db as _db, Risk, Asset, RiskAsset
from grc_risk.repository import LinkedAssetRow, RiskSnapshot, UpdateOutcome


@pytest.fixture
def app():
    """Application bound to a fresh in-memory SQLite database."""
    app = create_app('grc_risk.config.TestingConfig')
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_risk(db):
    def _make_risk(probability, impact, title='Test risk', status='active'):
        risk = Risk(title=title, probability=probability, impact=impact, status=status)
        db.session.add(risk)
        db.session.commit()
        return risk.id
    return _make_risk


@pytest.fixture
def make_asset(db):
    def _make_asset(criticality, name=None, status='active'):
        asset = Asset(name=name or f'{criticality} asset', criticality=criticality, status=status)
        db.session.add(asset)
        db.session.commit()
        return asset.id
    return _make_asset


@pytest.fixture
def link(db):
    def _link(risk_id, asset_id, impact_weight=1.0):
        db.session.add(RiskAsset(risk_id=risk_id, asset_id=asset_id, impact_weight=impact_weight))
        db.session.commit()
    return _link


@pytest.fixture
def stored_scores(db):
    def _stored_scores(risk_id):
        db.session.expire_all()
        risk = db.session.get(Risk, risk_id)
        return risk.probability, risk.impact
    return _stored_scores


class FakeRiskRepository:
    """In-memory stand-in for RiskRepository."""

    def __init__(self):
        self.risks = {}
        self.statuses = {}
        self.updates = []
        self.conflicts_remaining = 0
        self.on_conflict = None
        self.failing_ids = set()

    def add(self, risk_id, probability, impact, title='Fake risk', status='active'):
        self.risks[risk_id] = [probability, impact, title]
        self.statuses[risk_id] = status

    def get_risk(self, risk_id):
        if risk_id in self.failing_ids:
            raise StorageError(f'connection lost while loading risk {risk_id}')
        if risk_id not in self.risks:
            return None
        probability, impact, title = self.risks[risk_id]
        return RiskSnapshot(risk_id, title, probability, impact, self.statuses[risk_id])

    def update_risk_scores(self, risk_id, probability, impact, expected_probability, expected_impact):
        if risk_id not in self.risks:
            return UpdateOutcome.NOT_FOUND
        if self.conflicts_remaining:
            self.conflicts_remaining -= 1
            if self.on_conflict:
                self.on_conflict(self)
            return UpdateOutcome.CONFLICT
        if self.risks[risk_id][:2] != [expected_probability, expected_impact]:
            return UpdateOutcome.CONFLICT
        self.risks[risk_id][0] = probability
        self.risks[risk_id][1] = impact
        self.updates.append((risk_id, probability, impact))
        return UpdateOutcome.UPDATED

    def list_risks_with_linked_assets(self, statuses):
        return sorted(risk_id for risk_id, status in self.statuses.items() if status in statuses)

    def list_risk_ids_linked_to_asset(self, asset_id):
        return sorted(self.risks)


class FakeLinkRepository:
    def __init__(self):
        self.links = {}

    def add(self, risk_id, asset_id, criticality, impact_weight=1.0):
        self.links.setdefault(risk_id, []).append(
            LinkedAssetRow(asset_id, f'Asset {asset_id}', criticality, impact_weight))

    def get_active_linked_assets(self, risk_id):
        return list(self.links.get(risk_id, []))


@pytest.fixture
def fake_risks():
    return FakeRiskRepository()


@pytest.fixture
def fake_links():
    return FakeLinkRepository()
