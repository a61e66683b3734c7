"""
Version 1 API routers, mounted under ``/api``.
"""
from fastapi import APIRouter

from scorecard.api.v1 import people, metrics, weeks, weekly_values, scorecard, system, ws

api_router = APIRouter()

api_router.include_router(system.router, tags=["system"])
api_router.include_router(people.router, prefix="/people", tags=["people"])
api_router.include_router(metrics.router, prefix="/metrics", tags=["metrics"])
api_router.include_router(weeks.router, prefix="/weeks", tags=["weeks"])
api_router.include_router(weekly_values.router, prefix="/weekly-values", tags=["weekly-values"])
api_router.include_router(scorecard.router, prefix="/scorecard", tags=["scorecard"])
api_router.include_router(ws.router, tags=["realtime"])
