"""
房间管理路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from roomops.core.errors import DomainError
from roomops.models.ontology import RoomStatus
from roomops.models.schemas import RoomCreate, RoomUpdate, RoomResponse, RoomStatusUpdate
from roomops.routers.errors import as_http_exception
from roomops.services.room_service import RoomService
from roomops.stores import Stores, get_stores

router = APIRouter(prefix="/rooms", tags=["房间管理"])


@router.get("", response_model=List[RoomResponse])
def list_rooms(
    status: Optional[RoomStatus] = None,
    building: Optional[str] = None,
    room_type_id: Optional[str] = None,
    stores: Stores = Depends(get_stores)
):
    """获取房间列表"""
    rooms = RoomService(stores).list_rooms(status, building, room_type_id)
    return [RoomResponse.model_validate(r) for r in rooms]


@router.get("/summary")
def get_room_summary(stores: Stores = Depends(get_stores)):
    """房态统计"""
    return RoomService(stores).get_status_summary()


@router.post("", response_model=RoomResponse)
def create_room(data: RoomCreate, stores: Stores = Depends(get_stores)):
    """创建房间"""
    try:
        room = RoomService(stores).create_room(data.name, data.capacity, data.building, data.room_type_id)
    except DomainError as e:
        raise as_http_exception(e)
    return RoomResponse.model_validate(room)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: str, stores: Stores = Depends(get_stores)):
    """获取房间详情"""
    try:
        return RoomResponse.model_validate(RoomService(stores).get_room(room_id))
    except DomainError as e:
        raise as_http_exception(e)


@router.patch("/{room_id}", response_model=RoomResponse)
def update_room(room_id: str, data: RoomUpdate, stores: Stores = Depends(get_stores)):
    """更新房间信息"""
    try:
        room = RoomService(stores).update_room(
            room_id, data.name, data.capacity, data.building, data.room_type_id
        )
    except DomainError as e:
        raise as_http_exception(e)
    return RoomResponse.model_validate(room)


@router.post("/{room_id}/status", response_model=RoomResponse)
def update_room_status(room_id: str, data: RoomStatusUpdate, stores: Stores = Depends(get_stores)):
    """更新房态"""
    try:
        room = RoomService(stores).update_room_status(
            room_id, data.status, booking_id=data.booking_id, reason=data.reason
        )
    except DomainError as e:
        raise as_http_exception(e)
    return RoomResponse.model_validate(room)


@router.delete("/{room_id}")
def delete_room(room_id: str, stores: Stores = Depends(get_stores)):
    """删除房间"""
    try:
        RoomService(stores).delete_room(room_id)
    except DomainError as e:
        raise as_http_exception(e)
    return {"message": "房间已删除"}
