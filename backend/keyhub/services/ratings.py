"""
Contractor rating engine.

A rating is a dict with four sub-scores (customer, speed, warranty, internal)
on a 0-5 scale and a derived ``overall`` weighted by ``RATING_WEIGHTS``.
Out-of-range scores are rejected with ValidationError rather than clamped.
"""
import math
from numbers import Real
from typing import Dict, Optional

from keyhub.config import (
    COMMISSION_RATES,
    DEFAULT_SUB_SCORE,
    RATING_MAX,
    RATING_MIN,
    RATING_TIER_THRESHOLDS,
    RATING_WEIGHTS,
)
from keyhub.models.enums import RatingTier
from keyhub.utils.exceptions import ValidationError


SUB_SCORES = ('customer', 'speed', 'warranty', 'internal')

TIER_INFO = {
    RatingTier.ELITE: {
        'label': 'Elite',
        'description': 'Top performer with 10% commission rate',
    },
    RatingTier.PRO: {
        'label': 'Pro',
        'description': 'High performer with 9% commission rate',
    },
    RatingTier.STANDARD: {
        'label': 'Standard',
        'description': 'Standard performer with 8% commission rate',
    },
    RatingTier.NEEDS_IMPROVEMENT: {
        'label': 'Needs Improvement',
        'description': 'Below standard - coaching recommended',
    },
    RatingTier.PROBATION: {
        'label': 'Probation',
        'description': 'On probation - immediate improvement required',
    },
}

RATING_LEVELS = [
    (4.5, 'Excellent'),
    (3.5, 'Good'),
    (2.5, 'Average'),
    (1.5, 'Below Average'),
    (0.0, 'Poor'),
]


def _check_weights(weights: Dict[str, float]) -> None:
    if set(weights) != set(SUB_SCORES):
        raise ValueError(f"Rating weights must cover exactly {SUB_SCORES}")
    if any(w < 0 for w in weights.values()):
        raise ValueError("Rating weights must be non-negative")
    if not math.isclose(math.fsum(weights.values()), 1.0, abs_tol=1e-9):
        raise ValueError("Rating weights must sum to 1")


def _check_thresholds(thresholds) -> None:
    bounds = [bound for _, bound in thresholds]
    if bounds != sorted(bounds, reverse=True) or len(set(bounds)) != len(bounds):
        raise ValueError("Rating tier thresholds must be strictly descending")
    if bounds[-1] != RATING_MIN:
        raise ValueError("Lowest rating tier must start at the bottom of the scale")
    if {RatingTier(tier) for tier, _ in thresholds} != set(RatingTier):
        raise ValueError("Every rating tier needs exactly one threshold")


_check_weights(RATING_WEIGHTS)
_check_thresholds(RATING_TIER_THRESHOLDS)


def validate_score(value, field: str = 'score') -> float:
    """Return value as a float if it is a real number in [0, 5]; raise ValidationError otherwise."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError("must be a number", field=field, details={'value': repr(value)})
    value = float(value)
    if math.isnan(value) or not RATING_MIN <= value <= RATING_MAX:
        raise ValidationError(
            f"must be between {RATING_MIN:g} and {RATING_MAX:g}",
            field=field,
            details={'value': value},
        )
    return value


def _validate_partial(partial: Optional[dict]) -> Dict[str, float]:
    partial = partial or {}
    unknown = set(partial) - set(SUB_SCORES)
    if unknown:
        raise ValidationError(
            "unknown rating fields; overall is derived and cannot be set",
            field=', '.join(sorted(unknown)),
        )
    return {
        key: validate_score(value, key)
        for key, value in partial.items()
        if value is not None
    }


def _round_half_up(value: float, places: int = 1) -> float:
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def calculate_overall_rating(scores: dict) -> float:
    """Weighted average of the sub-scores, rounded to one decimal."""
    overall = math.fsum(scores[key] * RATING_WEIGHTS[key] for key in SUB_SCORES)
    return _round_half_up(overall)


def create_rating(partial: Optional[dict] = None) -> Dict[str, float]:
    """Build a rating; sub-scores not given default to the scale midpoint."""
    provided = _validate_partial(partial)
    rating = {key: provided.get(key, DEFAULT_SUB_SCORE) for key in SUB_SCORES}
    rating['overall'] = calculate_overall_rating(rating)
    return rating


def update_rating(current: dict, partial: Optional[dict]) -> Dict[str, float]:
    """
    Merge the given sub-scores into current and recompute overall.

    Sub-scores missing from partial (or set to None) keep their current value.
    current is not modified.
    """
    provided = _validate_partial(partial)
    updated = {}
    for key in SUB_SCORES:
        if key in provided:
            updated[key] = provided[key]
        else:
            updated[key] = validate_score(current.get(key, DEFAULT_SUB_SCORE), key)
    updated['overall'] = calculate_overall_rating(updated)
    return updated


def get_rating_tier(overall) -> RatingTier:
    """
    Classify an overall score.

    Bands are closed-open, [lower, next_lower), with the top band closed at 5:
    probation [0, 1.5), needs_improvement [1.5, 2.5), standard [2.5, 3.5),
    pro [3.5, 4.5), elite [4.5, 5].
    """
    overall = validate_score(overall, 'overall')
    for tier, lower in RATING_TIER_THRESHOLDS:
        if overall >= lower:
            return RatingTier(tier)
    # unreachable: the lowest threshold is RATING_MIN
    raise ValidationError("no rating tier matched", field='overall')


def get_commission_rate(tier) -> float:
    return COMMISSION_RATES[RatingTier(tier).value]


def get_tier_info(tier) -> Dict[str, str]:
    return TIER_INFO[RatingTier(tier)]


def get_rating_level(value) -> str:
    value = validate_score(value)
    for lower, label in RATING_LEVELS:
        if value >= lower:
            return label
    return RATING_LEVELS[-1][1]


def describe_rating(rating: dict) -> Dict[str, object]:
    """Rating with its tier and commission rate, as returned to the dashboard."""
    tier = get_rating_tier(rating['overall'])
    return {
        'rating': rating,
        'tier': tier.value,
        'tierLabel': TIER_INFO[tier]['label'],
        'commissionRate': get_commission_rate(tier),
    }
