"""
Dynamic risk calculation.

Recomputes a risk's probability and impact from the criticality of the
active assets linked to it:

- impact is scaled by a multiplier chosen from the most critical asset
  (critical +40%, high +30%, medium +20%, anything lower +10%);
- probability is raised when several critical (or high) assets are linked,
  since more exposed assets make the risk more likely to materialise.

Both values are rounded half up and capped at 5. The calculation only ever
raises values relative to the base it is given.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence

from .exceptions import InvariantViolation

MIN_SCORE = 1
MAX_SCORE = 5

NO_CHANGE_RATIONALE = 'No changes from linked assets'

# (minimum max-criticality, multiplier, reason), checked in order
IMPACT_RULES = (
    (5, Decimal('1.4'), 'Critical assets linked'),
    (4, Decimal('1.3'), 'High criticality assets linked'),
    (3, Decimal('1.2'), 'Medium criticality assets linked'),
)
DEFAULT_IMPACT_RULE = (Decimal('1.1'), 'Low criticality assets linked')


@dataclass(frozen=True)
class LinkedAsset:
    asset_id: int
    asset_name: str
    criticality: str
    criticality_score: int
    # Carried through for traceability; not used by the calculation.
    impact_weight: float = 1.0

    def to_dict(self):
        return {
            'asset_id': self.asset_id,
            'asset_name': self.asset_name,
            'criticality': self.criticality,
            'criticality_score': self.criticality_score,
            'impact_weight': self.impact_weight,
        }


@dataclass(frozen=True)
class CalculationResult:
    new_probability: int
    new_impact: int
    rationale: str


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _check_base(name: str, value: int) -> None:
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise ValueError(f"{name} must be between {MIN_SCORE} and {MAX_SCORE}, got {value}")


def _check_result(name: str, value: int) -> None:
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise InvariantViolation(f"computed {name} {value} is outside {MIN_SCORE}-{MAX_SCORE}")


def impact_multiplier(max_criticality: int):
    """Return (multiplier, reason) for the highest linked criticality score."""
    for threshold, multiplier, reason in IMPACT_RULES:
        if max_criticality >= threshold:
            return multiplier, reason
    return DEFAULT_IMPACT_RULE


def probability_adjustment(critical_count: int, high_count: int):
    """Return (adjustment, reason). The first matching rule wins."""
    if critical_count >= 3:
        return Decimal('1'), 'Multiple critical assets increase likelihood'
    if critical_count >= 2:
        return Decimal('0.5'), 'Two critical assets increase likelihood'
    if high_count >= 3:
        return Decimal('0.5'), 'Multiple high-criticality assets increase likelihood'
    return Decimal('0'), ''


def calculate_dynamic_risk(base_probability: int, base_impact: int,
                           linked_assets: Sequence[LinkedAsset]) -> CalculationResult:
    _check_base('probability', base_probability)
    _check_base('impact', base_impact)

    if not linked_assets:
        return CalculationResult(base_probability, base_impact, NO_CHANGE_RATIONALE)

    scores = [asset.criticality_score for asset in linked_assets]
    max_criticality = max(scores)
    critical_count = sum(1 for score in scores if score >= 5)
    high_count = sum(1 for score in scores if score >= 4)

    multiplier, impact_reason = impact_multiplier(max_criticality)
    adjustment, probability_reason = probability_adjustment(critical_count, high_count)

    new_impact = min(MAX_SCORE, round_half_up(Decimal(base_impact) * multiplier))
    new_probability = min(MAX_SCORE, round_half_up(Decimal(base_probability) + adjustment))

    _check_result('impact', new_impact)
    _check_result('probability', new_probability)

    reasons: List[str] = []
    if new_impact != base_impact:
        reasons.append(f"Impact: {base_impact} → {new_impact} ({impact_reason})")
    if new_probability != base_probability:
        reasons.append(f"Probability: {base_probability} → {new_probability} ({probability_reason})")

    rationale = '; '.join(reasons) if reasons else NO_CHANGE_RATIONALE
    return CalculationResult(new_probability, new_impact, rationale)
