"""Repository layer package."""

from npsdesk.repositories.account_repo import AccountRepo
from npsdesk.repositories.campaign_repo import CampaignRepo
from npsdesk.repositories.contact_repo import ContactRepo
from npsdesk.repositories.response_repo import ResponseRepo
from npsdesk.repositories.subscription_repo import SubscriptionRepo

__all__ = [
    "AccountRepo",
    "CampaignRepo",
    "ContactRepo",
    "ResponseRepo",
    "SubscriptionRepo",
]
