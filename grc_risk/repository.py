# Path: grc_risk/repository.py
"""Database access used by the reclassification service."""
import enum
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import StorageError
from .models import Asset, Risk, RiskAsset

ACTIVE_ASSET_STATUS = 'active'


class UpdateOutcome(enum.Enum):
    UPDATED = 'updated'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'


@dataclass(frozen=True)
class RiskSnapshot:
    id: int
    title: str
    probability: int
    impact: int
    status: str


@dataclass(frozen=True)
class LinkedAssetRow:
    asset_id: int
    asset_name: str
    criticality: str
    impact_weight: float


class RiskRepository:
    def __init__(self, session):
        self.session = session

    def get_risk(self, risk_id):
        try:
            row = self.session.execute(
                select(Risk.id, Risk.title, Risk.probability, Risk.impact, Risk.status)
                .where(Risk.id == risk_id)
            ).first()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to load risk {risk_id}: {e}") from e
        if row is None:
            return None
        return RiskSnapshot(id=row.id, title=row.title, probability=row.probability,
                            impact=row.impact, status=row.status)

    def update_risk_scores(self, risk_id, probability, impact,
                           expected_probability, expected_impact):
        """
        Write new scores only if the stored ones still match what was read.
        Commits on success so each risk in a batch is applied independently.
        The session must hold no other pending changes, since they would be
        committed (or rolled back) together with this write.
        """
        if self.session.new or self.session.dirty or self.session.deleted:
            raise StorageError(f"Refusing to update risk {risk_id}: session has uncommitted changes")
        try:
            result = self.session.execute(
                update(Risk)
                .where(Risk.id == risk_id,
                       Risk.probability == expected_probability,
                       Risk.impact == expected_impact)
                .values(probability=probability, impact=impact, updated_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                self.session.commit()
                return UpdateOutcome.UPDATED
            self.session.rollback()
            exists = self.session.execute(select(Risk.id).where(Risk.id == risk_id)).first()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to update risk {risk_id}: {e}") from e
        return UpdateOutcome.CONFLICT if exists else UpdateOutcome.NOT_FOUND

    def list_risks_with_linked_assets(self, statuses):
        try:
            rows = self.session.execute(
                select(Risk.id)
                .join(RiskAsset, RiskAsset.risk_id == Risk.id)
                .where(Risk.status.in_(list(statuses)))
                .distinct()
                .order_by(Risk.id)
            ).all()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to list risks with linked assets: {e}") from e
        return [row.id for row in rows]

    def list_risk_ids_linked_to_asset(self, asset_id):
        try:
            rows = self.session.execute(
                select(RiskAsset.risk_id)
                .where(RiskAsset.asset_id == asset_id)
                .distinct()
                .order_by(RiskAsset.risk_id)
            ).all()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to list risks linked to asset {asset_id}: {e}") from e
        return [row.risk_id for row in rows]


class AssetLinkRepository:
    def __init__(self, session):
        self.session = session

    def get_active_linked_assets(self, risk_id):
        # Status is filtered here on every call; a link may point at an
        # asset retired after it was created.
        try:
            rows = self.session.execute(
                select(RiskAsset.asset_id, RiskAsset.impact_weight,
                       Asset.name, Asset.criticality)
                .join(Asset, RiskAsset.asset_id == Asset.id)
                .where(RiskAsset.risk_id == risk_id,
                       Asset.status == ACTIVE_ASSET_STATUS)
                .order_by(RiskAsset.asset_id)
            ).all()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to load assets linked to risk {risk_id}: {e}") from e
        return [
            LinkedAssetRow(
                asset_id=row.asset_id,
                asset_name=row.name,
                criticality=row.criticality,
                impact_weight=row.impact_weight if row.impact_weight is not None else 1.0,
            )
            for row in rows
        ]
