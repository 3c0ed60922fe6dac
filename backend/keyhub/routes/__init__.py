"""
Routes package - all API route blueprints
"""
from keyhub.routes.health import health_bp
from keyhub.routes.admin import admin_bp
from keyhub.routes.kd import kd_bp
from keyhub.routes.financials import financials_bp
from keyhub.routes.contractors import contractors_bp
from keyhub.routes.google_calendar import google_calendar_bp
from keyhub.routes.webhooks import webhooks_bp
from keyhub.routes.users import users_bp

__all__ = [
    'health_bp',
    'admin_bp',
    'kd_bp',
    'financials_bp',
    'contractors_bp',
    'google_calendar_bp',
    'webhooks_bp',
    'users_bp',
]
