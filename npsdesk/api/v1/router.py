"""Version 1 API router."""
from fastapi import APIRouter

from npsdesk.api.v1.endpoints import (
    accounts,
    billing,
    campaigns,
    contacts,
    entitlements,
    surveys,
)

api_router = APIRouter()
api_router.include_router(accounts.router)
api_router.include_router(billing.router)
api_router.include_router(campaigns.router)
api_router.include_router(contacts.router)
api_router.include_router(entitlements.router)
api_router.include_router(surveys.router)
