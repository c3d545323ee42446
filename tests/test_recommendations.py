import math

import pytest

from mea_dashboard.domain.recommendations import RECOMMENDATION_TIERS, recommend, tier_for


@pytest.mark.parametrize(
    "score, label",
    [
        (0.0, "Urgent: basic implementation and process logging"),
        (1.99, "Urgent: basic implementation and process logging"),
        (2.0, "Priority: standardize existing processes"),
        (2.99, "Priority: standardize existing processes"),
        (3.0, "Improvement: apply well-defined, measured processes"),
        (4.0, "Optimization: focus on predictability and continuous improvement"),
        (4.99, "Optimization: focus on predictability and continuous improvement"),
        (5.0, "Excellent: sustain and innovate"),
    ],
)
def test_boundaries_are_half_open(score, label):
    assert tier_for(score).label == label


def test_every_score_maps_to_exactly_one_tier():
    for i in range(0, 501):
        score = i / 100
        matches = [t for t in RECOMMENDATION_TIERS if t.label in recommend(score, "MEA01")]
        assert len(matches) == 1


def test_recommend_embeds_domain_label():
    text = recommend(3.5, "MEA02")
    assert text.startswith("[MEA02] Improvement: apply well-defined, measured processes.")


def test_out_of_range_scores_are_still_total():
    assert tier_for(-0.5) is RECOMMENDATION_TIERS[0]
    assert tier_for(6.0) is RECOMMENDATION_TIERS[-1]
    assert tier_for(math.nan) is RECOMMENDATION_TIERS[0]
