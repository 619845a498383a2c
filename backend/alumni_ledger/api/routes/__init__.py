from fastapi import APIRouter

from alumni_ledger.api.routes import contributions, expenses, health, reports, settings


api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(contributions.router)
api_router.include_router(expenses.router)
api_router.include_router(reports.router)
api_router.include_router(settings.router)
