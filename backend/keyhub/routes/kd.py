"""
Keynote Digital dashboard routes - campaign, lead and subscriber summaries
"""
import logging

from flask import Blueprint, jsonify

from keyhub.extensions import load_collection, require_firebase_auth, require_permission
from keyhub.utils.campaigns import (
    calculate_cpl,
    count_active_campaigns,
    get_campaign_summary,
    top_campaigns_by_leads,
)
from keyhub.utils.dates import utc_now
from keyhub.utils.exceptions import DataIntegrityError, ValidationError
from keyhub.utils.leads import calculate_conversion_rate, get_lead_count_summary, get_lead_source_breakdown
from keyhub.utils.subscriptions import get_subscription_summary

logger = logging.getLogger(__name__)

kd_bp = Blueprint("kd", __name__, url_prefix="/api/kd")


@kd_bp.get("/summary")
@require_firebase_auth
@require_permission('manage_campaigns')
def summary():
    """Dashboard totals for campaigns, leads and subscriptions."""
    campaigns = load_collection('campaigns')
    leads = load_collection('leads')
    subscriptions = load_collection('subscriptions')
    now = utc_now()

    try:
        lead_summary = get_lead_count_summary(leads)
    except ValidationError as e:
        logger.error("Stored lead failed validation", extra={'error': e.message, 'details': e.details})
        raise DataIntegrityError('leads', e) from e
    try:
        subscription_summary = get_subscription_summary(subscriptions)
    except ValidationError as e:
        logger.error("Stored subscription failed validation", extra={'error': e.message, 'details': e.details})
        raise DataIntegrityError('subscriptions', e) from e

    top = [
        {
            'id': c['id'],
            'name': c.get('name'),
            'platform': c.get('platform'),
            'leadsGenerated': c.get('leadsGenerated') or 0,
            'spend': c.get('spend') or 0,
            'cpl': calculate_cpl(c),
        }
        for c in top_campaigns_by_leads(campaigns)
    ]

    return jsonify({
        'campaigns': {
            **get_campaign_summary(campaigns),
            'active': count_active_campaigns(campaigns, now),
        },
        'leads': {
            **lead_summary,
            'conversionRate': calculate_conversion_rate(leads),
        },
        'leadSources': get_lead_source_breakdown(leads),
        'subscriptions': subscription_summary,
        'topCampaigns': top,
    }), 200
