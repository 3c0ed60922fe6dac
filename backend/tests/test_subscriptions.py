"""
Tests for subscriber metrics
"""
import pytest

from keyhub.utils.exceptions import ValidationError
from keyhub.utils.subscriptions import get_lead_cap_usage, get_subscription_summary, get_tier_details


class TestSubscriptionSummary:
    """Test counts and MRR"""

    def test_summary(self, sample_subscriptions):
        summary = get_subscription_summary(sample_subscriptions)
        assert summary['total'] == 4
        assert (summary['active'], summary['paused'], summary['cancelled']) == (2, 1, 1)
        assert summary['mrr'] == 1298
        assert summary['byTier'] == {'starter': 2, 'growth': 1, 'pro': 1}

    def test_mrr_counts_active_only(self):
        subs = [
            {'tier': 'pro', 'status': 'paused', 'monthlyFee': 1499},
            {'tier': 'pro', 'status': 'cancelled', 'monthlyFee': 1499},
        ]
        assert get_subscription_summary(subs)['mrr'] == 0

    def test_by_tier_sums_to_total(self, sample_subscriptions):
        summary = get_subscription_summary(sample_subscriptions)
        assert sum(summary['byTier'].values()) == summary['total']

    def test_empty(self):
        summary = get_subscription_summary([])
        assert summary['total'] == 0
        assert summary['mrr'] == 0
        assert summary['byTier'] == {'starter': 0, 'growth': 0, 'pro': 0}

    def test_unknown_tier_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            get_subscription_summary([{'id': 's9', 'tier': 'platinum', 'status': 'active'}])
        assert exc_info.value.field == 'tier'
        assert exc_info.value.details == {'subscriptionId': 's9'}

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            get_subscription_summary([{'tier': 'starter', 'status': 'trial'}])
        assert exc_info.value.field == 'status'


class TestTiers:
    """Test tier lookups and lead caps"""

    def test_tier_details(self):
        assert get_tier_details('growth')['monthlyFee'] == 899

    def test_unknown_tier(self):
        with pytest.raises(ValidationError):
            get_tier_details('enterprise')

    def test_cap_usage(self):
        assert get_lead_cap_usage({'leadCap': 20}, 5) == {'used': 5, 'cap': 20, 'percentage': 25.0, 'remaining': 15}

    def test_cap_usage_is_bounded(self):
        usage = get_lead_cap_usage({'leadCap': 15}, 20)
        assert usage['percentage'] == 100
        assert usage['remaining'] == 0

    def test_no_cap(self):
        assert get_lead_cap_usage({}, 3)['percentage'] == 0
