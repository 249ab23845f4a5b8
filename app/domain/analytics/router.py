"""Analytics router - FastAPI endpoints for dashboard reports"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...config import LEADERBOARD_SIZE
from ...database import get_db
from ...models import User
from .schemas import DepartmentsResponse, ReportResponse, SummaryResponse, TimeseriesResponse
from .service import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """Dependency injection for AnalyticsService"""
    return AnalyticsService(db)


@router.get("/report", response_model=ReportResponse)
async def get_report(
    period: Optional[str] = Query("monthly"),
    freelancer_id: Optional[int] = Query(None, alias="freelancerId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: User = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Per-freelancer performance for a reporting period"""
    try:
        return service.report(period, freelancer_id, start_date, end_date)
    except (HTTPException, OperationalError):
        raise
    except Exception as e:
        logger.error(f"❌ Failed to build report for period {period}: {str(e)}")
        logger.exception(e)
        raise HTTPException(status_code=500, detail="Failed to build report")


@router.get("/timeseries", response_model=TimeseriesResponse)
async def get_timeseries(
    period: Optional[str] = Query("monthly"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    limit: int = Query(LEADERBOARD_SIZE, ge=1, le=100),
    current_user: User = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Bucketed activity, status distribution and top freelancers"""
    try:
        return service.timeseries(period, start_date, end_date, limit)
    except (HTTPException, OperationalError):
        raise
    except Exception as e:
        logger.error(f"❌ Failed to build time series for period {period}: {str(e)}")
        logger.exception(e)
        raise HTTPException(status_code=500, detail="Failed to build time series")


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    current_user: User = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Dashboard headline numbers"""
    return service.summary()


@router.get("/departments", response_model=DepartmentsResponse)
async def get_department_stats(
    current_user: User = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Template volume and progress per department"""
    return service.departments()
