"""
Models package - enums and Firestore document builders
"""
from keyhub.models.enums import (
    CampaignPlatform,
    CampaignStatus,
    ContractorStatus,
    InvoiceStatus,
    LeadQuality,
    LeadSource,
    LeadStatus,
    RatingTier,
    SubscriptionStatus,
    SubscriptionTier,
    UserRole,
    UserStatus,
)

__all__ = [
    'CampaignPlatform',
    'CampaignStatus',
    'ContractorStatus',
    'InvoiceStatus',
    'LeadQuality',
    'LeadSource',
    'LeadStatus',
    'RatingTier',
    'SubscriptionStatus',
    'SubscriptionTier',
    'UserRole',
    'UserStatus',
]
