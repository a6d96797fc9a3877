"""
服务目录、房型与楼栋
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class ServiceItem:
    """可计费服务，price 为单价"""
    id: str
    name: str
    unit: str
    price: Decimal
    description: Optional[str] = None


@dataclass
class RoomType:
    """房型：code 唯一，base_price 为基础房价"""
    id: str
    code: str
    name: str
    base_price: Decimal
    capacity: int = 1
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class Building:
    """楼栋（房间分组标签）"""
    id: str
    name: str
    note: Optional[str] = None
