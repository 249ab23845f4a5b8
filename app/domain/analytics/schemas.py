"""Analytics domain schemas - Pydantic models for report responses"""

from typing import Optional

from pydantic import BaseModel


class PeriodEcho(BaseModel):
    type: str
    startDate: Optional[str] = None
    endDate: Optional[str] = None


class StatusBreakdown(BaseModel):
    submitted: int = 0
    reviewed: int = 0
    published: int = 0
    inProgress: int = 0
    needsFixes: int = 0
    assigned: int = 0


class FreelancerReport(BaseModel):
    freelancerId: int
    username: str
    email: Optional[str] = None
    totalItems: int
    byStatus: StatusBreakdown
    totalEarnings: float
    completedEarnings: float


class ReportResponse(BaseModel):
    """Schema for the per-freelancer performance report"""

    period: PeriodEcho
    reports: list[FreelancerReport]
    skippedEvents: int = 0
    generatedAt: str


class SeriesBucket(BaseModel):
    date: str
    created: int = 0
    submitted: int = 0
    published: int = 0


class StatusCount(BaseModel):
    status: str
    count: int


class LeaderboardEntry(BaseModel):
    freelancerId: int
    username: str
    templatesCount: int
    publishedCount: int


class TimeseriesResponse(BaseModel):
    period: PeriodEcho
    granularity: str
    series: list[SeriesBucket]
    statusDistribution: list[StatusCount]
    topFreelancers: list[LeaderboardEntry]
    skippedEvents: int = 0


class OverallCounts(BaseModel):
    totalItems: int
    published: int
    reviewed: int
    inProgress: int
    newItems: int
    totalValue: float


class MonthCounts(BaseModel):
    created: int
    published: int


class SummaryResponse(BaseModel):
    """Schema for the dashboard headline numbers"""

    overall: OverallCounts
    thisMonth: MonthCounts
    lastMonth: MonthCounts
    activeFreelancers: int
    totalFreelancers: int
    monthOverMonthGrowth: float


class DepartmentStats(BaseModel):
    department: str
    templateCount: int
    published: int
    inProgress: int


class DepartmentsResponse(BaseModel):
    departments: list[DepartmentStats]
    generatedAt: str
