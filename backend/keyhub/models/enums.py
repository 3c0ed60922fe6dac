"""
Enums and constants for data models

Values match the strings stored in Firestore documents. All enums mix in
``str`` so members compare equal to their stored value and serialize with
``jsonify``.
"""
from enum import Enum


class UserRole(str, Enum):
    """User role enumeration"""
    OWNER = "owner"
    ADMIN = "admin"
    SALES_REP = "sales_rep"
    CONTRACTOR = "contractor"
    PM = "pm"
    SUBSCRIBER = "subscriber"
    PARTNER = "partner"
    PENDING = "pending"


class UserStatus(str, Enum):
    """User account status enumeration"""
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class ContractorStatus(str, Enum):
    """Contractor status enumeration"""
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class LeadQuality(str, Enum):
    """Lead quality enumeration"""
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


class LeadStatus(str, Enum):
    """Lead lifecycle status enumeration"""
    NEW = "new"
    ASSIGNED = "assigned"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    LOST = "lost"
    RETURNED = "returned"


class LeadSource(str, Enum):
    """Lead source enumeration"""
    GOOGLE_ADS = "google_ads"
    META = "meta"
    TIKTOK = "tiktok"
    EVENT = "event"
    REFERRAL = "referral"
    OTHER = "other"


class CampaignPlatform(str, Enum):
    """Ad campaign platform enumeration"""
    GOOGLE_ADS = "google_ads"
    META = "meta"
    TIKTOK = "tiktok"
    EVENT = "event"
    OTHER = "other"


class CampaignStatus(str, Enum):
    """Campaign schedule status"""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"


class SubscriptionTier(str, Enum):
    """Subscriber plan tier enumeration"""
    STARTER = "starter"
    GROWTH = "growth"
    PRO = "pro"


class SubscriptionStatus(str, Enum):
    """Subscription status enumeration"""
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class InvoiceStatus(str, Enum):
    """Invoice status enumeration"""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class RatingTier(str, Enum):
    """Contractor rating tier, lowest to highest"""
    PROBATION = "probation"
    NEEDS_IMPROVEMENT = "needs_improvement"
    STANDARD = "standard"
    PRO = "pro"
    ELITE = "elite"
