"""
Inbound webhook processing for Facebook lead ads and Vapi voice calls
"""
import logging
from typing import Dict, Iterator, Optional

from keyhub.extensions import get_db
from keyhub.models.enums import LeadQuality, LeadSource, LeadStatus
from keyhub.utils.dates import utc_now

logger = logging.getLogger(__name__)

# Vapi endedReason -> stored call outcome
CALL_OUTCOMES = {
    'customer-ended-call': 'answered',
    'assistant-ended-call': 'answered',
    'voicemail': 'voicemail',
    'customer-did-not-answer': 'no_answer',
    'customer-busy': 'busy',
}


# ========================================
# Facebook lead ads
# ========================================

def iter_leadgen_changes(body: dict) -> Iterator[dict]:
    """Yield the value of every leadgen change in a page webhook body."""
    if not isinstance(body, dict) or body.get('object') != 'page':
        return
    for entry in body.get('entry') or []:
        for change in (entry or {}).get('changes') or []:
            if (change or {}).get('field') == 'leadgen' and isinstance(change.get('value'), dict):
                yield change['value']


def _parse_field_data(field_data) -> Dict[str, object]:
    parsed = {'name': None, 'email': None, 'phone': None, 'notes': []}
    for field in field_data or []:
        values = field.get('values') or []
        value = values[0] if values else ''
        key = (field.get('name') or '').lower()
        if key in ('full_name', 'name'):
            parsed['name'] = value
        elif key == 'email':
            parsed['email'] = value
        elif key in ('phone_number', 'phone'):
            parsed['phone'] = value
        elif value:
            parsed['notes'].append(f"{field.get('name')}: {value}")
    return parsed


def build_facebook_lead(value: dict, now=None) -> dict:
    """Lead document for a leadgen notification; field_data is used when Facebook includes it."""
    now = now or utc_now()
    fields = _parse_field_data(value.get('field_data'))
    leadgen_id = value.get('leadgen_id')
    phone = fields['phone'] or None

    return {
        'source': LeadSource.META.value,
        'campaignId': None,
        'market': 'Facebook',
        'trade': 'General',
        'customer': {
            'name': fields['name'] or 'Facebook Lead',
            'phone': phone,
            'email': fields['email'] or None,
            'address': {'street': '', 'city': '', 'state': '', 'zip': '', 'lat': None, 'lng': None},
            'notes': '\n'.join(fields['notes']) or f"Facebook Lead ID: {leadgen_id}",
        },
        'quality': LeadQuality.WARM.value,
        'status': LeadStatus.NEW.value,
        'assignedTo': None,
        'assignedType': None,
        'returnReason': None,
        'returnedAt': None,
        'scheduledCallAt': now if phone else None,
        'autoCallEnabled': bool(phone),
        'callAttempts': 0,
        'facebookData': {
            'leadgenId': leadgen_id,
            'formId': value.get('form_id'),
            'pageId': value.get('page_id'),
            'createdTime': value.get('created_time'),
        },
        'createdAt': now,
        'updatedAt': now,
    }


def create_facebook_leads(body: dict) -> list:
    """Store a lead for each leadgen change; returns the new lead ids."""
    leads = get_db().collection('leads')
    created = []
    for value in iter_leadgen_changes(body):
        _, ref = leads.add(build_facebook_lead(value))
        created.append(ref.id)
        logger.info("Created Facebook lead", extra={'lead_id': ref.id, 'leadgen_id': value.get('leadgen_id')})
    return created


# ========================================
# Vapi voice calls
# ========================================

def call_outcome(ended_reason: Optional[str]) -> str:
    return CALL_OUTCOMES.get(ended_reason, 'failed')


def _call_duration(messages) -> float:
    return max((m.get('secondsFromStart') or 0 for m in messages or []), default=0)


def build_call_report(message: dict, now=None) -> dict:
    """voiceCalls update for an end-of-call-report event."""
    now = now or utc_now()
    call = message.get('call') or {}
    analysis = call.get('analysis')
    return {
        'status': 'completed',
        'endedReason': call.get('endedReason'),
        'outcome': call_outcome(call.get('endedReason')),
        'duration': _call_duration(call.get('messages')),
        'transcript': call.get('transcript') or message.get('transcript'),
        'summary': call.get('summary') or message.get('summary'),
        'recordingUrl': call.get('recordingUrl') or message.get('recordingUrl'),
        'cost': call.get('cost'),
        'costBreakdown': call.get('costBreakdown'),
        'messages': call.get('messages'),
        'structuredData': (analysis or {}).get('structuredData'),
        'analysis': analysis,
        'completedAt': now,
        'updatedAt': now,
    }


def build_lead_call_update(report: dict, now=None) -> dict:
    """Copy call results onto the lead; an answered call marks it contacted."""
    now = now or utc_now()
    update = {
        'lastCallOutcome': report['outcome'],
        'lastCallSummary': report['summary'],
        'lastCallTranscript': report['transcript'],
        'lastCallRecordingUrl': report['recordingUrl'],
        'callAnalysis': report['structuredData'],
        'updatedAt': now,
    }
    if report['outcome'] == 'answered':
        update['status'] = LeadStatus.CONTACTED.value
        update['contactedAt'] = now
    return update


def find_voice_call(vapi_call_id: str):
    """Snapshot of the voiceCalls document for a Vapi call id, or None."""
    query = get_db().collection('voiceCalls').where('vapiCallId', '==', vapi_call_id).limit(1)
    for doc in query.stream():
        return doc
    return None


def process_vapi_event(payload: dict) -> Optional[str]:
    """
    Apply a Vapi webhook event to the matching voice call.

    Returns the event type that was applied, or None when the event was
    ignored (no call, no matching record, or an unhandled type).
    """
    message = (payload or {}).get('message') or {}
    call = message.get('call') or {}
    event_type = message.get('type')
    if not call.get('id'):
        return None

    call_doc = find_voice_call(call['id'])
    if call_doc is None:
        logger.info("No voice call record for Vapi call", extra={'vapi_call_id': call['id']})
        return None

    if event_type == 'status-update':
        call_doc.reference.update({'status': call.get('status'), 'updatedAt': utc_now()})
        return event_type

    if event_type == 'end-of-call-report':
        report = build_call_report(message)
        call_doc.reference.update(report)
        lead_id = (call_doc.to_dict() or {}).get('leadId')
        if lead_id:
            get_db().collection('leads').document(lead_id).update(build_lead_call_update(report))
        logger.info(
            "Voice call completed",
            extra={'vapi_call_id': call['id'], 'outcome': report['outcome'], 'lead_id': lead_id},
        )
        return event_type

    if event_type != 'transcript':
        logger.info("Unhandled Vapi webhook type", extra={'type': event_type})
    return None
