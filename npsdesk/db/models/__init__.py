"""Database models package exports."""

from npsdesk.db.models.account import Account
from npsdesk.db.models.campaign import Campaign
from npsdesk.db.models.contact import Contact
from npsdesk.db.models.response import NpsResponse
from npsdesk.db.models.subscription import Subscription

__all__ = [
    "Account",
    "Campaign",
    "Contact",
    "NpsResponse",
    "Subscription",
]
