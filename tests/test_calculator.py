from decimal import Decimal

import pytest

from grc_risk.calculator import (
    NO_CHANGE_RATIONALE,
    LinkedAsset,
    calculate_dynamic_risk,
    round_half_up,
)


def assets(*scores, weight=1.0):
    return [LinkedAsset(i, f'Asset {i}', 'x', score, weight) for i, score in enumerate(scores, 1)]


def test_single_critical_asset_raises_impact_only():
    result = calculate_dynamic_risk(2, 3, assets(5))

    assert (result.new_probability, result.new_impact) == (2, 4)
    assert result.rationale == 'Impact: 3 → 4 (Critical assets linked)'


def test_three_critical_assets_raise_both_fields():
    result = calculate_dynamic_risk(3, 2, assets(5, 5, 5))

    assert (result.new_probability, result.new_impact) == (4, 3)
    assert result.rationale == (
        'Impact: 2 → 3 (Critical assets linked); '
        'Probability: 3 → 4 (Multiple critical assets increase likelihood)'
    )


def test_risk_at_ceiling_is_unchanged():
    result = calculate_dynamic_risk(5, 5, assets(2))

    assert (result.new_probability, result.new_impact) == (5, 5)
    assert result.rationale == NO_CHANGE_RATIONALE


def test_half_point_probability_rounds_up():
    result = calculate_dynamic_risk(3, 1, assets(5, 5))

    assert result.new_probability == 4
    assert result.new_impact == 1
    assert result.rationale == 'Probability: 3 → 4 (Two critical assets increase likelihood)'


def test_half_point_rounds_up_on_even_base():
    # Python's round(2.5) is 2; the engine must give 3
    result = calculate_dynamic_risk(2, 1, assets(5, 5))
    assert result.new_probability == 3


def test_three_high_assets_raise_probability():
    result = calculate_dynamic_risk(2, 2, assets(4, 4, 4))

    assert (result.new_probability, result.new_impact) == (3, 3)
    assert result.rationale == (
        'Impact: 2 → 3 (High criticality assets linked); '
        'Probability: 2 → 3 (Multiple high-criticality assets increase likelihood)'
    )


def test_critical_assets_count_towards_high_threshold():
    result = calculate_dynamic_risk(1, 1, assets(5, 4, 4))
    assert result.new_probability == 2


def test_two_high_assets_do_not_raise_probability():
    result = calculate_dynamic_risk(2, 5, assets(4, 4))
    assert result.new_probability == 2


@pytest.mark.parametrize("base_impact,score,expected", [
    (3, 3, 4),   # 3.6
    (2, 3, 2),   # 2.4
    (4, 1, 4),   # 4.4
    (3, 2, 3),   # 3.3
    (4, 4, 5),   # 5.2
    (5, 5, 5),   # 7 capped
])
def test_impact_multiplier_by_max_criticality(base_impact, score, expected):
    assert calculate_dynamic_risk(1, base_impact, assets(score)).new_impact == expected


def test_multiplier_uses_highest_criticality_only():
    assert calculate_dynamic_risk(1, 3, assets(1, 2, 5)).new_impact == 4


def test_medium_asset_reason():
    result = calculate_dynamic_risk(1, 3, assets(3))
    assert result.rationale == 'Impact: 3 → 4 (Medium criticality assets linked)'


def test_impact_weight_does_not_affect_result():
    light = calculate_dynamic_risk(2, 3, assets(5, 4, weight=0.1))
    heavy = calculate_dynamic_risk(2, 3, assets(5, 4, weight=10.0))
    assert light == heavy


def test_empty_asset_list_reports_no_change():
    result = calculate_dynamic_risk(2, 3, [])
    assert (result.new_probability, result.new_impact) == (2, 3)
    assert result.rationale == NO_CHANGE_RATIONALE


@pytest.mark.parametrize("probability,impact", [(0, 3), (6, 3), (3, 0), (3, 6)])
def test_out_of_range_base_is_rejected(probability, impact):
    with pytest.raises(ValueError):
        calculate_dynamic_risk(probability, impact, assets(3))


ASSET_SETS = [(1,), (2,), (3,), (4,), (5,), (5, 5), (5, 5, 5), (4, 4, 4), (5, 4, 4), (1, 2, 3, 4, 5)]


def test_results_always_within_bounds():
    for probability in range(1, 6):
        for impact in range(1, 6):
            for scores in ASSET_SETS:
                result = calculate_dynamic_risk(probability, impact, assets(*scores))
                assert 1 <= result.new_probability <= 5
                assert 1 <= result.new_impact <= 5
                assert result.new_probability >= probability
                assert result.new_impact >= impact


def test_impact_is_monotonic_in_max_criticality():
    for impact in range(1, 6):
        by_criticality = [calculate_dynamic_risk(1, impact, assets(score)).new_impact for score in (3, 4, 5)]
        assert by_criticality == sorted(by_criticality)


def test_unchanged_result_uses_no_change_rationale():
    for probability in range(1, 6):
        for impact in range(1, 6):
            for scores in ASSET_SETS:
                result = calculate_dynamic_risk(probability, impact, assets(*scores))
                if (result.new_probability, result.new_impact) == (probability, impact):
                    assert result.rationale == NO_CHANGE_RATIONALE


def test_calculation_is_deterministic():
    first = calculate_dynamic_risk(2, 2, assets(5, 4, 3))
    second = calculate_dynamic_risk(2, 2, assets(5, 4, 3))
    assert first == second


@pytest.mark.parametrize("value,expected", [('3.5', 4), ('2.5', 3), ('4.2', 4), ('5.5', 6), ('1.4', 1)])
def test_round_half_up(value, expected):
    assert round_half_up(Decimal(value)) == expected
