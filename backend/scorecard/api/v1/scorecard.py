"""
Scorecard grid endpoints.
"""
from datetime import date
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.api.deps import get_today
from scorecard.db.base import get_db
from scorecard.schemas.scorecard import ScorecardResponse
from scorecard.services.scorecard import build_scorecard, scorecard_to_csv

router = APIRouter()


@router.get("", response_model=ScorecardResponse)
async def get_scorecard(
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    """Completed weeks and one row per metric with its weekly cells."""
    return await build_scorecard(db, today)


@router.get("/export")
async def export_scorecard(
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    """Download the scorecard as CSV."""
    scorecard = await build_scorecard(db, today)
    return Response(
        content=scorecard_to_csv(scorecard),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="scorecard-{today.isoformat()}.csv"'}
    )
