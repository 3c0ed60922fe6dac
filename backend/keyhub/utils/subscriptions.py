"""
Subscriber metrics - monthly recurring revenue and lead cap usage
"""
import math
from typing import Dict, List

from keyhub.config import SUBSCRIPTION_TIERS
from keyhub.models.enums import SubscriptionStatus, SubscriptionTier
from keyhub.utils.exceptions import ValidationError

SUBSCRIPTION_TIER_LABELS = {
    'starter': 'Starter',
    'growth': 'Growth',
    'pro': 'Pro',
}


def get_tier_details(tier: str) -> dict:
    details = SUBSCRIPTION_TIERS.get(tier)
    if details is None:
        raise ValidationError(f"unknown tier {tier!r}", field='tier')
    return details


def get_subscription_summary(subscriptions: List[dict]) -> Dict[str, object]:
    """
    Counts by status and tier, plus MRR.

    mrr sums monthlyFee over active subscriptions only. byTier counts every
    subscription, so its values sum to total.
    """
    by_status = {s.value: 0 for s in SubscriptionStatus}
    by_tier = {t.value: 0 for t in SubscriptionTier}
    active_fees = []

    for sub in subscriptions:
        tier = sub.get('tier')
        status = sub.get('status')
        if tier not in by_tier:
            raise ValidationError(f"unknown value {tier!r}", field='tier', details={'subscriptionId': sub.get('id')})
        if status not in by_status:
            raise ValidationError(f"unknown value {status!r}", field='status', details={'subscriptionId': sub.get('id')})

        by_tier[tier] += 1
        by_status[status] += 1
        if status == SubscriptionStatus.ACTIVE.value:
            active_fees.append(sub.get('monthlyFee') or 0)

    return {
        'total': len(subscriptions),
        'active': by_status['active'],
        'paused': by_status['paused'],
        'cancelled': by_status['cancelled'],
        'mrr': math.fsum(active_fees),
        'byTier': by_tier,
    }


def get_lead_cap_usage(subscription: dict, leads_used: int) -> Dict[str, float]:
    cap = subscription.get('leadCap') or 0
    percentage = (leads_used / cap * 100) if cap > 0 else 0
    return {
        'used': leads_used,
        'cap': cap,
        'percentage': min(percentage, 100),
        'remaining': max(cap - leads_used, 0),
    }
