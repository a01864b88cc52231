# Path: grc_risk/reclassification.py
"""
Risk reclassification driven by linked asset criticality.

Runs whenever an asset's criticality or status changes, a new asset is
linked to a risk, or an operator requests a full recalculation. Each risk
is handled as its own read-compute-write step:

1. load the risk and its linked *active* assets;
2. score each asset's criticality and run the dynamic calculation with the
   risk's currently stored probability/impact as the base;
3. write the new scores only if they differ, guarded on the values read
   in step 1.

The base is always the stored value, so repeated triggers can ratchet
scores upward; unlinking or downgrading an asset never lowers them.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from .calculator import LinkedAsset, calculate_dynamic_risk
from .criticality import classify_criticality, normalize_criticality
from .exceptions import ConcurrencyConflict, ReclassificationError
from .models import risk_level_for
from .repository import AssetLinkRepository, RiskRepository, UpdateOutcome

RECLASSIFIABLE_STATUSES = frozenset({'active', 'monitoring', 'pending'})

# One automatic retry after a failed guarded write.
MAX_WRITE_ATTEMPTS = 2


@dataclass(frozen=True)
class ReclassificationResult:
    risk_id: int
    title: str
    old_probability: int
    new_probability: int
    old_impact: int
    new_impact: int
    rationale: str
    linked_assets: List[LinkedAsset]

    @property
    def old_risk_score(self):
        return self.old_probability * self.old_impact

    @property
    def new_risk_score(self):
        return self.new_probability * self.new_impact

    @property
    def changed(self):
        return (self.new_probability, self.new_impact) != (self.old_probability, self.old_impact)

    def to_dict(self):
        return {
            'risk_id': self.risk_id,
            'title': self.title,
            'old_probability': self.old_probability,
            'new_probability': self.new_probability,
            'old_impact': self.old_impact,
            'new_impact': self.new_impact,
            'old_risk_score': self.old_risk_score,
            'new_risk_score': self.new_risk_score,
            'old_risk_level': risk_level_for(self.old_risk_score),
            'new_risk_level': risk_level_for(self.new_risk_score),
            'rationale': self.rationale,
            'linked_assets': [asset.to_dict() for asset in self.linked_assets],
        }


@dataclass(frozen=True)
class ReclassificationFailure:
    risk_id: int
    error_type: str
    message: str

    def to_dict(self):
        return {'risk_id': self.risk_id, 'error_type': self.error_type, 'message': self.message}


@dataclass
class BulkReclassificationReport:
    examined: int = 0
    results: List[ReclassificationResult] = field(default_factory=list)
    failures: List[ReclassificationFailure] = field(default_factory=list)

    @property
    def changed_count(self):
        return len(self.results)

    @property
    def failed_count(self):
        return len(self.failures)

    def to_dict(self):
        return {
            'examined': self.examined,
            'changed': self.changed_count,
            'failed': self.failed_count,
            'results': [result.to_dict() for result in self.results],
            'failures': [failure.to_dict() for failure in self.failures],
        }


class RiskReclassificationService:
    def __init__(self, risk_repository, link_repository, calculator=calculate_dynamic_risk):
        self.risks = risk_repository
        self.links = link_repository
        self.calculator = calculator

    def _evaluate(self, risk_id) -> Optional[ReclassificationResult]:
        """Shared by the live and preview paths. Never writes."""
        risk = self.risks.get_risk(risk_id)
        if risk is None:
            logger.info("Risk {} not found", risk_id)
            return None

        rows = self.links.get_active_linked_assets(risk_id)
        if not rows:
            logger.info("Risk {} has no linked active assets - no reclassification", risk_id)
            return None

        linked_assets = [
            LinkedAsset(
                asset_id=row.asset_id,
                asset_name=row.asset_name,
                criticality=normalize_criticality(row.criticality),
                criticality_score=classify_criticality(row.criticality),
                impact_weight=row.impact_weight,
            )
            for row in rows
        ]

        calculation = self.calculator(risk.probability, risk.impact, linked_assets)
        return ReclassificationResult(
            risk_id=risk.id,
            title=risk.title,
            old_probability=risk.probability,
            new_probability=calculation.new_probability,
            old_impact=risk.impact,
            new_impact=calculation.new_impact,
            rationale=calculation.rationale,
            linked_assets=linked_assets,
        )

    def reclassify_risk(self, risk_id) -> Optional[ReclassificationResult]:
        """
        Recompute and persist a risk's scores.

        Returns None when the risk does not exist, has no linked active
        assets, or its scores are already up to date.
        """
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            result = self._evaluate(risk_id)
            if result is None:
                return None
            if not result.changed:
                logger.info("Risk {} scores unchanged - no update needed", risk_id)
                return None

            outcome = self.risks.update_risk_scores(
                risk_id,
                result.new_probability,
                result.new_impact,
                expected_probability=result.old_probability,
                expected_impact=result.old_impact,
            )
            if outcome is UpdateOutcome.UPDATED:
                logger.success("Reclassified risk {}: {} → {} ({})", risk_id,
                               result.old_risk_score, result.new_risk_score, result.rationale)
                return result
            if outcome is UpdateOutcome.NOT_FOUND:
                logger.info("Risk {} was deleted before its scores could be updated", risk_id)
                return None
            logger.warning("Risk {} changed while being reclassified (attempt {}/{})",
                           risk_id, attempt, MAX_WRITE_ATTEMPTS)

        raise ConcurrencyConflict(risk_id)

    def preview_reclassification(self, risk_id) -> Optional[ReclassificationResult]:
        """What reclassify_risk would do, without writing anything."""
        return self._evaluate(risk_id)

    def _reclassify_many(self, risk_ids) -> BulkReclassificationReport:
        report = BulkReclassificationReport()
        for risk_id in risk_ids:
            report.examined += 1
            try:
                result = self.reclassify_risk(risk_id)
            except (ReclassificationError, ValueError) as e:
                logger.error("Failed to reclassify risk {}: {}", risk_id, e)
                report.failures.append(ReclassificationFailure(risk_id, type(e).__name__, str(e)))
                continue
            if result is not None:
                report.results.append(result)
        return report

    def reclassify_risks_by_asset(self, asset_id) -> BulkReclassificationReport:
        risk_ids = self.risks.list_risk_ids_linked_to_asset(asset_id)
        if not risk_ids:
            logger.info("Asset {} not linked to any risks", asset_id)
            return BulkReclassificationReport()

        report = self._reclassify_many(risk_ids)
        logger.info("Reclassified {} of {} risks affected by asset {} ({} failed)",
                    report.changed_count, report.examined, asset_id, report.failed_count)
        return report

    def reclassify_all_risks(self, statuses=RECLASSIFIABLE_STATUSES) -> BulkReclassificationReport:
        risk_ids = self.risks.list_risks_with_linked_assets(statuses)
        if not risk_ids:
            logger.info("No risks with linked assets found")
            return BulkReclassificationReport()

        report = self._reclassify_many(risk_ids)
        logger.info("Bulk reclassification complete: {} of {} risks updated ({} failed)",
                    report.changed_count, report.examined, report.failed_count)
        return report


def build_service(session):
    return RiskReclassificationService(RiskRepository(session), AssetLinkRepository(session))
