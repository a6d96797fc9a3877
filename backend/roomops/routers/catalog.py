"""
服务目录、房型与楼栋路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from roomops.core.errors import DomainError
from roomops.models.schemas import (
    ServiceItemCreate, ServiceItemUpdate, ServiceItemResponse,
    RoomTypeCreate, RoomTypeUpdate, RoomTypeResponse,
    BuildingCreate, BuildingUpdate, BuildingResponse
)
from roomops.routers.errors import as_http_exception
from roomops.services.catalog_service import CatalogService, RoomTypeService, BuildingService
from roomops.stores import Stores, get_stores

services_router = APIRouter(prefix="/services", tags=["服务目录"])
room_types_router = APIRouter(prefix="/room-types", tags=["房型管理"])
buildings_router = APIRouter(prefix="/buildings", tags=["楼栋管理"])


# ============== 服务目录 ==============

@services_router.get("", response_model=List[ServiceItemResponse])
def list_services(query: Optional[str] = None, stores: Stores = Depends(get_stores)):
    """获取服务项目列表"""
    return [ServiceItemResponse.model_validate(s) for s in CatalogService(stores).list_services(query)]


@services_router.post("", response_model=ServiceItemResponse)
def create_service(data: ServiceItemCreate, stores: Stores = Depends(get_stores)):
    """创建服务项目"""
    try:
        item = CatalogService(stores).create_service(data.name, data.unit, data.price, data.description)
    except DomainError as e:
        raise as_http_exception(e)
    return ServiceItemResponse.model_validate(item)


@services_router.get("/{service_id}", response_model=ServiceItemResponse)
def get_service(service_id: str, stores: Stores = Depends(get_stores)):
    try:
        return ServiceItemResponse.model_validate(CatalogService(stores).get_service(service_id))
    except DomainError as e:
        raise as_http_exception(e)


@services_router.patch("/{service_id}", response_model=ServiceItemResponse)
def update_service(service_id: str, data: ServiceItemUpdate, stores: Stores = Depends(get_stores)):
    """更新服务项目"""
    try:
        item = CatalogService(stores).update_service(
            service_id, data.name, data.unit, data.price, data.description
        )
    except DomainError as e:
        raise as_http_exception(e)
    return ServiceItemResponse.model_validate(item)


@services_router.delete("/{service_id}")
def delete_service(service_id: str, stores: Stores = Depends(get_stores)):
    """删除服务项目"""
    try:
        CatalogService(stores).delete_service(service_id)
    except DomainError as e:
        raise as_http_exception(e)
    return {"message": "服务项目已删除"}


# ============== 房型 ==============

@room_types_router.get("", response_model=List[RoomTypeResponse])
def list_room_types(
    query: Optional[str] = None,
    sort: str = "code",
    descending: bool = False,
    stores: Stores = Depends(get_stores)
):
    """获取房型列表"""
    try:
        room_types = RoomTypeService(stores).list_room_types(query, sort, descending)
    except DomainError as e:
        raise as_http_exception(e)
    return [RoomTypeResponse.model_validate(t) for t in room_types]


@room_types_router.post("", response_model=RoomTypeResponse)
def create_room_type(data: RoomTypeCreate, stores: Stores = Depends(get_stores)):
    """创建房型"""
    try:
        room_type = RoomTypeService(stores).create_room_type(
            data.code, data.name, data.base_price, data.capacity, data.description
        )
    except DomainError as e:
        raise as_http_exception(e)
    return RoomTypeResponse.model_validate(room_type)


@room_types_router.get("/{room_type_id}", response_model=RoomTypeResponse)
def get_room_type(room_type_id: str, stores: Stores = Depends(get_stores)):
    try:
        return RoomTypeResponse.model_validate(RoomTypeService(stores).get_room_type(room_type_id))
    except DomainError as e:
        raise as_http_exception(e)


@room_types_router.patch("/{room_type_id}", response_model=RoomTypeResponse)
def update_room_type(room_type_id: str, data: RoomTypeUpdate, stores: Stores = Depends(get_stores)):
    """更新房型"""
    try:
        room_type = RoomTypeService(stores).update_room_type(
            room_type_id, data.code, data.name, data.base_price, data.capacity, data.description
        )
    except DomainError as e:
        raise as_http_exception(e)
    return RoomTypeResponse.model_validate(room_type)


@room_types_router.delete("/{room_type_id}")
def delete_room_type(room_type_id: str, stores: Stores = Depends(get_stores)):
    """删除房型"""
    try:
        RoomTypeService(stores).delete_room_type(room_type_id)
    except DomainError as e:
        raise as_http_exception(e)
    return {"message": "房型已删除"}


# ============== 楼栋 ==============

@buildings_router.get("", response_model=List[BuildingResponse])
def list_buildings(stores: Stores = Depends(get_stores)):
    """获取楼栋列表"""
    return [BuildingResponse.model_validate(b) for b in BuildingService(stores).list_buildings()]


@buildings_router.post("", response_model=BuildingResponse)
def create_building(data: BuildingCreate, stores: Stores = Depends(get_stores)):
    """创建楼栋"""
    try:
        building = BuildingService(stores).create_building(data.name, data.note)
    except DomainError as e:
        raise as_http_exception(e)
    return BuildingResponse.model_validate(building)


@buildings_router.get("/{building_id}", response_model=BuildingResponse)
def get_building(building_id: str, stores: Stores = Depends(get_stores)):
    try:
        return BuildingResponse.model_validate(BuildingService(stores).get_building(building_id))
    except DomainError as e:
        raise as_http_exception(e)


@buildings_router.patch("/{building_id}", response_model=BuildingResponse)
def update_building(building_id: str, data: BuildingUpdate, stores: Stores = Depends(get_stores)):
    """更新楼栋（改名同步到房间）"""
    try:
        building = BuildingService(stores).update_building(building_id, data.name, data.note)
    except DomainError as e:
        raise as_http_exception(e)
    return BuildingResponse.model_validate(building)


@buildings_router.delete("/{building_id}")
def delete_building(building_id: str, stores: Stores = Depends(get_stores)):
    """删除楼栋"""
    try:
        BuildingService(stores).delete_building(building_id)
    except DomainError as e:
        raise as_http_exception(e)
    return {"message": "楼栋已删除"}
