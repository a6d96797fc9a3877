"""
客户活动记录路由
"""
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends
from roomops.models.ontology import HistoryType
from roomops.models.schemas import HistoryEntryResponse
from roomops.services.history_service import HistoryService
from roomops.stores import Stores, get_stores

router = APIRouter(prefix="/history", tags=["活动记录"])


@router.get("", response_model=List[HistoryEntryResponse])
def list_history(
    type: Optional[HistoryType] = None,
    query: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    stores: Stores = Depends(get_stores)
):
    """查询客户活动记录"""
    entries = HistoryService(stores).list_entries(type, query, date_from, date_to)
    return [HistoryEntryResponse.model_validate(e) for e in entries]
