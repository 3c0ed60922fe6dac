"""
Campaign metrics - cost per lead, summaries and rankings
"""
import math
from typing import Dict, List, Optional

from keyhub.config import TOP_CAMPAIGNS_LIMIT
from keyhub.models.enums import CampaignStatus
from keyhub.utils.dates import to_datetime, utc_now

CAMPAIGN_PLATFORM_LABELS = {
    'google_ads': 'Google Ads',
    'meta': 'Meta (Facebook/Instagram)',
    'tiktok': 'TikTok',
    'event': 'Event',
    'other': 'Other',
}


def format_campaign_platform(platform: str) -> str:
    return CAMPAIGN_PLATFORM_LABELS.get(platform, platform)


def _spend(campaign: dict) -> float:
    return campaign.get('spend') or 0


def _leads(campaign: dict) -> int:
    return campaign.get('leadsGenerated') or 0


def calculate_cpl(campaign: dict) -> float:
    """Cost per lead; 0 when the campaign has not generated any leads."""
    leads = _leads(campaign)
    if leads <= 0:
        return 0
    return _spend(campaign) / leads


def get_campaign_summary(campaigns: List[dict]) -> Dict[str, float]:
    """
    Totals across campaigns.

    avgCPL is total spend over total leads (not the mean of per-campaign
    CPLs), and 0 when there are no leads.
    """
    total_spend = math.fsum(_spend(c) for c in campaigns)
    total_leads = sum(_leads(c) for c in campaigns)
    avg_cpl = total_spend / total_leads if total_leads > 0 else 0

    return {
        'total': len(campaigns),
        'totalSpend': total_spend,
        'totalLeads': total_leads,
        'avgCPL': avg_cpl,
    }


def get_campaign_status(campaign: dict, now=None) -> CampaignStatus:
    """upcoming before startDate, ended after endDate, active otherwise."""
    now = to_datetime(now) or utc_now()
    start = to_datetime(campaign.get('startDate'))
    end = to_datetime(campaign.get('endDate'))

    if start and now < start:
        return CampaignStatus.UPCOMING
    if end and now > end:
        return CampaignStatus.ENDED
    return CampaignStatus.ACTIVE


def is_campaign_active(campaign: dict, now=None) -> bool:
    return get_campaign_status(campaign, now) == CampaignStatus.ACTIVE


def count_active_campaigns(campaigns: List[dict], now=None) -> int:
    now = to_datetime(now) or utc_now()
    return sum(1 for c in campaigns if is_campaign_active(c, now))


def top_campaigns_by_leads(campaigns: List[dict], limit: Optional[int] = TOP_CAMPAIGNS_LIMIT) -> List[dict]:
    """Campaigns ordered by leads generated, highest first; ties keep input order."""
    ranked = sorted(campaigns, key=_leads, reverse=True)
    if limit is None:
        return ranked
    return ranked[:limit]
