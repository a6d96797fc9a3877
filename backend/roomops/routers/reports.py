"""
报表路由
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from roomops.models.schemas import DashboardStats, TopService, PaymentReport
from roomops.services.report_service import ReportService
from roomops.stores import Stores, get_stores

router = APIRouter(prefix="/reports", tags=["报表统计"])


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(stores: Stores = Depends(get_stores)):
    """仪表盘统计"""
    return DashboardStats.model_validate(ReportService(stores).get_dashboard_stats())


@router.get("/top-services", response_model=List[TopService])
def get_top_services(limit: int = Query(5, ge=1, le=50), stores: Stores = Depends(get_stores)):
    """最常点的服务"""
    return [TopService.model_validate(s) for s in ReportService(stores).get_top_services(limit)]


@router.get("/payments", response_model=PaymentReport)
def get_payment_report(days: int = 7, stores: Stores = Depends(get_stores)):
    """收款汇总（天数限制在 7~30）"""
    return PaymentReport.model_validate(ReportService(stores).get_payment_report(days))
