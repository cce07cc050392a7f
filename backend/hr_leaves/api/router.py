from fastapi import APIRouter

from hr_leaves.api.accruals import accruals_router
from hr_leaves.api.adjustments import adjustments_router
from hr_leaves.api.entitlements import entitlements_router
from hr_leaves.api.requests import requests_router
from hr_leaves.api.team import team_router

api_router = APIRouter()
api_router.include_router(entitlements_router)
api_router.include_router(accruals_router)
api_router.include_router(requests_router)
api_router.include_router(adjustments_router)
api_router.include_router(team_router)
