"""
Lead metrics - count summaries, source breakdowns and the return window
"""
from datetime import timedelta
from typing import Dict, List, Optional

from keyhub.config import LEAD_RETURN_WINDOW_HOURS
from keyhub.models.enums import LeadQuality, LeadSource, LeadStatus
from keyhub.utils.dates import to_datetime, utc_now
from keyhub.utils.exceptions import ValidationError

LEAD_STATUS_LABELS = {
    'new': 'New',
    'assigned': 'Assigned',
    'contacted': 'Contacted',
    'qualified': 'Qualified',
    'converted': 'Converted',
    'lost': 'Lost',
    'returned': 'Returned',
}

LEAD_SOURCE_LABELS = {
    'google_ads': 'Google Ads',
    'meta': 'Meta (Facebook/Instagram)',
    'tiktok': 'TikTok',
    'event': 'Event',
    'referral': 'Referral',
    'other': 'Other',
}

LEAD_QUALITY_LABELS = {
    'hot': 'Hot',
    'warm': 'Warm',
    'cold': 'Cold',
}

# Leads in these statuses can no longer be handed back
NON_RETURNABLE_STATUSES = frozenset({LeadStatus.RETURNED, LeadStatus.CONVERTED, LeadStatus.LOST})


def _enum_value(enum_cls, lead: dict, field: str):
    raw = lead.get(field)
    try:
        return enum_cls(raw)
    except ValueError:
        raise ValidationError(
            f"unknown value {raw!r}",
            field=field,
            details={'leadId': lead.get('id')},
        )


def get_lead_count_summary(leads: List[dict]) -> Dict[str, object]:
    """
    Count leads by quality and by status.

    Each lead is counted once in exactly one quality bucket and one status
    bucket, so hot + warm + cold == total and sum(byStatus) == total. A lead
    with a quality or status outside the known values raises ValidationError.
    """
    by_quality = {q.value: 0 for q in LeadQuality}
    by_status = {s.value: 0 for s in LeadStatus}

    for lead in leads:
        by_quality[_enum_value(LeadQuality, lead, 'quality').value] += 1
        by_status[_enum_value(LeadStatus, lead, 'status').value] += 1

    return {
        'total': len(leads),
        'hot': by_quality['hot'],
        'warm': by_quality['warm'],
        'cold': by_quality['cold'],
        'new': by_status['new'],
        'assigned': by_status['assigned'],
        'converted': by_status['converted'],
        'byStatus': by_status,
    }


def group_leads_by_source(leads: List[dict]) -> Dict[str, List[dict]]:
    """Group leads by source. Unrecognised sources are grouped under 'other'."""
    grouped = {s.value: [] for s in LeadSource}
    for lead in leads:
        source = lead.get('source')
        if source not in grouped:
            source = LeadSource.OTHER.value
        grouped[source].append(lead)
    return grouped


def get_lead_source_breakdown(leads: List[dict]) -> List[Dict[str, object]]:
    """
    Share of leads per source.

    Percentages keep full precision; round them only when rendering.
    """
    total = len(leads)
    breakdown = []
    for source, group in group_leads_by_source(leads).items():
        count = len(group)
        breakdown.append({
            'source': source,
            'label': LEAD_SOURCE_LABELS[source],
            'count': count,
            'percentage': (count / total * 100) if total > 0 else 0,
        })
    return breakdown


def format_percentage(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}%"


def calculate_conversion_rate(leads: List[dict]) -> float:
    if not leads:
        return 0
    converted = sum(1 for lead in leads if lead.get('status') == LeadStatus.CONVERTED.value)
    return converted / len(leads) * 100


def _hours_since_creation(lead: dict, now) -> Optional[float]:
    created_at = to_datetime(lead.get('createdAt'))
    if not created_at:
        return None
    now = to_datetime(now) or utc_now()
    return (now - created_at) / timedelta(hours=1)


def can_return_lead(lead: dict, now=None) -> bool:
    """A lead can be returned within the return window unless it is already closed out."""
    if lead.get('status') in {s.value for s in NON_RETURNABLE_STATUSES}:
        return False
    hours = _hours_since_creation(lead, now)
    if hours is None:
        return False
    return hours <= LEAD_RETURN_WINDOW_HOURS


def get_return_window_remaining(lead: dict, now=None) -> Optional[float]:
    """Hours left in the return window, 0 once it has closed, None without createdAt."""
    hours = _hours_since_creation(lead, now)
    if hours is None:
        return None
    return max(LEAD_RETURN_WINDOW_HOURS - hours, 0)
