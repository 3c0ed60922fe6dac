"""
Contractor routes - rating updates
"""
import logging

from flask import Blueprint, jsonify, request

from keyhub.extensions import get_db, require_firebase_auth, require_permission
from keyhub.services.ratings import create_rating, describe_rating, update_rating
from keyhub.utils.dates import utc_now
from keyhub.utils.exceptions import DataIntegrityError, NotFoundError, ValidationError
from keyhub.utils.validation import RatingUpdateRequest, validate_request

logger = logging.getLogger(__name__)

contractors_bp = Blueprint("contractors", __name__, url_prefix="/api/contractors")


@contractors_bp.patch("/<contractor_id>/rating")
@require_firebase_auth
@require_permission('view_all_contractors')
def update_contractor_rating(contractor_id):
    """
    Update some or all rating sub-scores; overall, tier and commission are recomputed.
    Body: { "customer"?: 0-5, "speed"?: 0-5, "warranty"?: 0-5, "internal"?: 0-5 }
    """
    partial = validate_request(RatingUpdateRequest, request.get_json(silent=True) or {})

    contractor_ref = get_db().collection('contractors').document(contractor_id)
    contractor_doc = contractor_ref.get()
    if not contractor_doc.exists:
        raise NotFoundError('Contractor')

    current = (contractor_doc.to_dict() or {}).get('rating')
    if current:
        try:
            rating = update_rating(current, partial)
        except ValidationError as e:
            # body was validated above; this is the stored rating
            logger.error("Stored rating failed validation", extra={'contractor_id': contractor_id, 'error': e.message})
            raise DataIntegrityError('contractors', e) from e
    else:
        rating = create_rating(partial)
    described = describe_rating(rating)

    contractor_ref.update({
        'rating': rating,
        'ratingTier': described['tier'],
        'commissionRate': described['commissionRate'],
        'updatedAt': utc_now(),
    })

    logger.info(
        "Contractor rating updated",
        extra={'contractor_id': contractor_id, 'overall': rating['overall'], 'tier': described['tier']},
    )
    return jsonify(described), 200
