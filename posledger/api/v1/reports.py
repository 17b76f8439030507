from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from posledger.api.deps import get_repos
from posledger.core.config import BEST_SELLER_LIMIT
from posledger.repositories import Repositories
from posledger.schemas.response import SuccessResponse

router = APIRouter()


@router.get("/daily", response_model=SuccessResponse)
async def daily_report(day: Optional[date] = None, repos: Repositories = Depends(get_repos)):
    report = await repos.reports.get_daily_report(day or date.today())
    return SuccessResponse(data=report.model_dump())


@router.get("/break-even", response_model=SuccessResponse)
async def break_even(repos: Repositories = Depends(get_repos)):
    result = await repos.reports.get_break_even_analysis()
    return SuccessResponse(data=result.model_dump())


@router.get("/best-sellers", response_model=SuccessResponse)
async def best_sellers(limit: int = Query(BEST_SELLER_LIMIT, gt=0, le=100), repos: Repositories = Depends(get_repos)):
    sellers = await repos.reports.get_best_sellers(limit)
    return SuccessResponse(data=[s.model_dump() for s in sellers])


@router.get("/peak-hours", response_model=SuccessResponse)
async def peak_hours(repos: Repositories = Depends(get_repos)):
    hours = await repos.reports.get_peak_hours()
    return SuccessResponse(data=[h.model_dump() for h in hours])


@router.get("/weekly", response_model=SuccessResponse)
async def weekly_trend(repos: Repositories = Depends(get_repos)):
    reports = await repos.reports.get_weekly_trend()
    return SuccessResponse(data=[r.model_dump() for r in reports])
