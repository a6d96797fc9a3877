"""
客户活动记录（入住/退房/服务），只追加
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from roomops.models.ontology import HistoryType


@dataclass
class HistoryEntry:
    id: str
    customer_name: str
    type: HistoryType
    timestamp: datetime = field(default_factory=datetime.now)
    reference_id: Optional[str] = None
    note: Optional[str] = None
