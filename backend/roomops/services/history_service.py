"""
客户活动记录服务
记录只追加，不提供修改
"""
from typing import List, Optional
from datetime import date, datetime
import logging

from roomops.core.store import new_id
from roomops.domain.history import HistoryEntry
from roomops.domain.validation import require_text, optional_text, parse_enum
from roomops.models.ontology import HistoryType
from roomops.stores import Stores

logger = logging.getLogger(__name__)


class HistoryService:
    """客户活动记录"""

    def __init__(self, stores: Stores):
        self.stores = stores

    def record(self, customer_name: str, entry_type: HistoryType,
               reference_id: Optional[str] = None, note: Optional[str] = None,
               timestamp: Optional[datetime] = None) -> HistoryEntry:
        """追加一条记录"""
        entry = HistoryEntry(
            id=new_id("hist"),
            customer_name=require_text(customer_name, "客户名称"),
            type=parse_enum(HistoryType, entry_type, "type"),
            timestamp=timestamp or datetime.now(),
            reference_id=reference_id,
            note=optional_text(note),
        )
        with self.stores.transaction():
            self.stores.history.insert(entry)
        logger.debug(f"History recorded: {entry.type.value} {entry.customer_name}")
        return entry

    def list_entries(self, entry_type: Optional[HistoryType] = None,
                     query: Optional[str] = None,
                     date_from: Optional[date] = None,
                     date_to: Optional[date] = None) -> List[HistoryEntry]:
        """
        查询记录（最新的在前）

        query 匹配客户名或备注；date_from / date_to 按记录日期过滤（含两端）。
        """
        criteria = {}
        if entry_type is not None:
            criteria["type"] = parse_enum(HistoryType, entry_type, "type")
        entries = self.stores.history.list(**criteria)
        if query:
            keyword = query.strip().lower()
            entries = [
                e for e in entries
                if keyword in e.customer_name.lower() or keyword in (e.note or "").lower()
            ]
        if date_from:
            entries = [e for e in entries if e.timestamp.date() >= date_from]
        if date_to:
            entries = [e for e in entries if e.timestamp.date() <= date_to]
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)
