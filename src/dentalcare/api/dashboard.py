from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dentalcare.api.deps import get_sessionmaker
from dentalcare.api.schemas import DashboardStatsOut, dashboard_stats_out
from dentalcare.dashboard import DashboardAggregator

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsOut)
async def get_dashboard_stats(
    request: Request,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_sessionmaker),
):
    """Fresh point-in-time statistics; either complete or an error, never partial."""
    top_n = getattr(request.app.state, "dashboard_top_n", 5)
    snapshot = await DashboardAggregator(session_factory, top_n=top_n).snapshot()
    return dashboard_stats_out(snapshot)
