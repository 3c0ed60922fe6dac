"""
Application configuration - all constants, environment variables, and config dictionaries
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ========================================
# Firebase
# ========================================
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "keyhub-central")
FIREBASE_STORAGE_BUCKET = os.getenv("FIREBASE_STORAGE_BUCKET", f"{FIREBASE_PROJECT_ID}.appspot.com")
FLASK_SECRET = os.getenv("FLASK_SECRET", "dev")

# ========================================
# Google Calendar OAuth
# ========================================
GOOGLE_CALENDAR_CLIENT_ID = os.getenv("GOOGLE_CALENDAR_CLIENT_ID")
GOOGLE_CALENDAR_CLIENT_SECRET = os.getenv("GOOGLE_CALENDAR_CLIENT_SECRET")
GOOGLE_CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/calendar.events",
]
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_REVOKE_URL = "https://oauth2.googleapis.com/revoke"
APP_URL = os.getenv("APP_URL", "http://localhost:3000").rstrip("/")


def get_calendar_redirect_uri():
    """Get the Google Calendar OAuth callback URL"""
    return os.getenv("GOOGLE_CALENDAR_REDIRECT_URI") or f"{APP_URL}/api/google-calendar/callback"


# ========================================
# Signing secrets
# ========================================
OAUTH_STATE_SECRET = os.getenv("OAUTH_STATE_SECRET", "")
OAUTH_STATE_MAX_AGE_SECONDS = int(os.getenv("OAUTH_STATE_MAX_AGE_SECONDS", "600"))
VAPI_WEBHOOK_SECRET = os.getenv("VAPI_WEBHOOK_SECRET", "")
FB_APP_SECRET = os.getenv("FB_APP_SECRET", "")
FB_WEBHOOK_VERIFY_TOKEN = os.getenv("FB_WEBHOOK_VERIFY_TOKEN", "")
# Webhooks are rejected when their secret is missing unless this is switched on
ALLOW_UNSIGNED_WEBHOOKS = _env_flag("ALLOW_UNSIGNED_WEBHOOKS")

# ========================================
# CORS
# ========================================
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()] or [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

# ========================================
# Contractor ratings
# ========================================
RATING_WEIGHTS = {
    'customer': 0.4,
    'speed': 0.2,
    'warranty': 0.2,
    'internal': 0.2,
}
RATING_MIN = 0.0
RATING_MAX = 5.0
DEFAULT_SUB_SCORE = 3.0

# Lower bound of each tier, highest first. Each band is [bound, next_bound).
RATING_TIER_THRESHOLDS = [
    ('elite', 4.5),
    ('pro', 3.5),
    ('standard', 2.5),
    ('needs_improvement', 1.5),
    ('probation', 0.0),
]

COMMISSION_RATES = {
    'elite': 0.10,
    'pro': 0.09,
    'standard': 0.08,
    'needs_improvement': 0.08,
    'probation': 0.08,
}

# ========================================
# Subscription tiers (Keynote Digital)
# ========================================
SUBSCRIPTION_TIERS = {
    'starter': {
        'monthlyFee': 399,
        'leadRange': '10-15',
        'adSpendMin': 600,
    },
    'growth': {
        'monthlyFee': 899,
        'leadRange': '15-25',
        'adSpendMin': 900,
    },
    'pro': {
        'monthlyFee': 1499,
        'leadRange': 'Flexible',
        'adSpendMin': 1500,
    },
}

# ========================================
# Leads & invoices
# ========================================
LEAD_RETURN_WINDOW_HOURS = 24
NET_TERMS_DAYS = 30
DEFAULT_INVOICE_PREFIX = "INV"
TOP_CAMPAIGNS_LIMIT = 5
