"""
Health check routes
"""
from flask import Blueprint, jsonify

from keyhub.extensions import get_db

health_bp = Blueprint('health', __name__)


@health_bp.route('/ping')
def ping():
    return "pong"


@health_bp.route('/health')
def health():
    """Health check endpoint"""
    try:
        get_db()
        firebase_status = 'initialized'
    except RuntimeError:
        firebase_status = 'not_initialized'

    return jsonify({
        'status': 'healthy',
        'services': {
            'firebase': {'status': firebase_status},
        }
    })


@health_bp.get("/healthz")
def healthz():
    """Kubernetes health check endpoint"""
    return jsonify({"status": "ok"}), 200
