"""
服务目录、房型与楼栋管理
"""
from typing import Any, List, Optional
import logging

from roomops.core.errors import RoomInUse, ValidationError
from roomops.core.store import new_id
from roomops.domain.catalog import Building, RoomType, ServiceItem
from roomops.domain.validation import require_text, optional_text, require_amount, require_positive_int
from roomops.stores import Stores

logger = logging.getLogger(__name__)


class CatalogService:
    """服务目录（可计费服务项目）"""

    def __init__(self, stores: Stores):
        self.stores = stores

    def list_services(self, query: Optional[str] = None) -> List[ServiceItem]:
        items = self.stores.service_items.list()
        if query:
            keyword = query.strip().lower()
            items = [i for i in items if keyword in i.name.lower()]
        return sorted(items, key=lambda i: i.name)

    def get_service(self, service_id: str) -> ServiceItem:
        return self.stores.service_items.require(service_id)

    def create_service(self, name: str, unit: str, price: Any,
                       description: Optional[str] = None) -> ServiceItem:
        item = ServiceItem(
            id=new_id("svc"),
            name=require_text(name, "服务名称"),
            unit=require_text(unit, "计量单位"),
            price=require_amount(price, "单价"),
            description=optional_text(description),
        )
        with self.stores.transaction():
            self.stores.service_items.insert(item)
        logger.info(f"Service item created: {item.name} {item.price}/{item.unit}")
        return item

    def update_service(self, service_id: str, name: Optional[str] = None,
                       unit: Optional[str] = None, price: Any = None,
                       description: Optional[str] = None) -> ServiceItem:
        item = self.get_service(service_id)
        if name is not None:
            item.name = require_text(name, "服务名称")
        if unit is not None:
            item.unit = require_text(unit, "计量单位")
        if price is not None:
            item.price = require_amount(price, "单价")
        if description is not None:
            item.description = optional_text(description)
        with self.stores.transaction():
            self.stores.service_items.update(item)
        return item

    def delete_service(self, service_id: str) -> bool:
        item = self.get_service(service_id)
        with self.stores.transaction():
            self.stores.service_items.delete(item.id)
        return True


ROOM_TYPE_SORT_FIELDS = {
    "code": lambda t: t.code.lower(),
    "name": lambda t: t.name.lower(),
    "base_price": lambda t: t.base_price,
    "capacity": lambda t: t.capacity,
    "created_at": lambda t: t.created_at,
}


class RoomTypeService:
    """房型管理，code 唯一；仍有房间使用的房型不能删除"""

    def __init__(self, stores: Stores):
        self.stores = stores

    def list_room_types(self, query: Optional[str] = None, sort: str = "code",
                        descending: bool = False) -> List[RoomType]:
        """query 匹配 code、名称、描述"""
        if sort not in ROOM_TYPE_SORT_FIELDS:
            raise ValidationError(f"不支持的排序字段: {sort}")
        room_types = self.stores.room_types.list()
        if query:
            keyword = query.strip().lower()
            room_types = [
                t for t in room_types
                if keyword in t.code.lower()
                or keyword in t.name.lower()
                or keyword in (t.description or "").lower()
            ]
        return sorted(room_types, key=ROOM_TYPE_SORT_FIELDS[sort], reverse=descending)

    def get_room_type(self, room_type_id: str) -> RoomType:
        return self.stores.room_types.require(room_type_id)

    def create_room_type(self, code: str, name: str, base_price: Any = 0, capacity: int = 1,
                         description: Optional[str] = None) -> RoomType:
        code = require_text(code, "房型代码")
        self._ensure_unique(code)
        room_type = RoomType(
            id=new_id("rt"),
            code=code,
            name=require_text(name, "房型名称"),
            base_price=require_amount(base_price, "基础房价"),
            capacity=require_positive_int(capacity, "容纳人数"),
            description=optional_text(description),
        )
        with self.stores.transaction():
            self.stores.room_types.insert(room_type)
        logger.info(f"Room type created: {room_type.code} {room_type.name}")
        return room_type

    def update_room_type(self, room_type_id: str, code: Optional[str] = None,
                         name: Optional[str] = None, base_price: Any = None,
                         capacity: Optional[int] = None,
                         description: Optional[str] = None) -> RoomType:
        room_type = self.get_room_type(room_type_id)
        if code is not None:
            code = require_text(code, "房型代码")
            if code != room_type.code:
                self._ensure_unique(code)
                room_type.code = code
        if name is not None:
            room_type.name = require_text(name, "房型名称")
        if base_price is not None:
            room_type.base_price = require_amount(base_price, "基础房价")
        if capacity is not None:
            room_type.capacity = require_positive_int(capacity, "容纳人数")
        if description is not None:
            room_type.description = optional_text(description)
        with self.stores.transaction():
            self.stores.room_types.update(room_type)
        return room_type

    def delete_room_type(self, room_type_id: str) -> bool:
        room_type = self.get_room_type(room_type_id)
        rooms = self.stores.rooms.list(room_type_id=room_type.id)
        if rooms:
            raise RoomInUse(
                f"房型 {room_type.code} 仍被 {len(rooms)} 个房间使用，无法删除",
                entity="RoomType", entity_id=room_type.id,
            )
        with self.stores.transaction():
            self.stores.room_types.delete(room_type.id)
        logger.info(f"Room type deleted: {room_type.code}")
        return True

    def _ensure_unique(self, code: str) -> None:
        if self.stores.room_types.list(code=code):
            raise ValidationError(f"房型代码 {code} 已存在", entity="RoomType")


class BuildingService:
    """楼栋管理，名称唯一"""

    def __init__(self, stores: Stores):
        self.stores = stores

    def list_buildings(self) -> List[Building]:
        return sorted(self.stores.buildings.list(), key=lambda b: b.name)

    def get_building(self, building_id: str) -> Building:
        return self.stores.buildings.require(building_id)

    def create_building(self, name: str, note: Optional[str] = None) -> Building:
        name = require_text(name, "楼栋名称")
        self._ensure_unique(name)
        building = Building(id=new_id("bld"), name=name, note=optional_text(note))
        with self.stores.transaction():
            self.stores.buildings.insert(building)
        return building

    def update_building(self, building_id: str, name: Optional[str] = None,
                        note: Optional[str] = None) -> Building:
        """改名时同步更新房间上的楼栋名"""
        building = self.get_building(building_id)
        old_name = building.name
        if name is not None:
            name = require_text(name, "楼栋名称")
            if name != old_name:
                self._ensure_unique(name)
                building.name = name
        if note is not None:
            building.note = optional_text(note)

        with self.stores.transaction():
            self.stores.buildings.update(building)
            if building.name != old_name:
                for room in self.stores.rooms.list(building=old_name):
                    room.building = building.name
                    self.stores.rooms.update(room)
        return building

    def delete_building(self, building_id: str) -> bool:
        building = self.get_building(building_id)
        rooms = self.stores.rooms.list(building=building.name)
        if rooms:
            raise RoomInUse(
                f"楼栋 {building.name} 下还有 {len(rooms)} 个房间，无法删除",
                entity="Building", entity_id=building.id,
            )
        with self.stores.transaction():
            self.stores.buildings.delete(building.id)
        return True

    def _ensure_unique(self, name: str) -> None:
        if self.stores.buildings.list(name=name):
            raise ValidationError(f"楼栋 {name} 已存在", entity="Building")
