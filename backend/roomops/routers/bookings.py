"""
预订管理路由
"""
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends
from roomops.core.errors import DomainError
from roomops.models.ontology import BookingStatus
from roomops.models.schemas import BookingCreate, BookingReject, BookingCancel, BookingResponse
from roomops.routers.errors import as_http_exception
from roomops.services.booking_service import BookingService
from roomops.stores import Stores, get_stores

router = APIRouter(prefix="/bookings", tags=["预订管理"])


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    status: Optional[BookingStatus] = None,
    room_id: Optional[str] = None,
    query: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    stores: Stores = Depends(get_stores)
):
    """获取预订列表"""
    bookings = BookingService(stores).list_bookings(status, room_id, query, date_from, date_to)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.post("", response_model=BookingResponse)
def create_booking(data: BookingCreate, stores: Stores = Depends(get_stores)):
    """创建预订"""
    try:
        booking = BookingService(stores).create_booking(
            data.room_id, data.customer_name, data.start, data.end,
            guests=data.guests, note=data.note
        )
    except DomainError as e:
        raise as_http_exception(e)
    return BookingResponse.model_validate(booking)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: str, stores: Stores = Depends(get_stores)):
    """获取预订详情"""
    try:
        return BookingResponse.model_validate(BookingService(stores).get_booking(booking_id))
    except DomainError as e:
        raise as_http_exception(e)


@router.post("/{booking_id}/approve", response_model=BookingResponse)
def approve_booking(booking_id: str, stores: Stores = Depends(get_stores)):
    """审批通过"""
    try:
        booking = BookingService(stores).approve_booking(booking_id)
    except DomainError as e:
        raise as_http_exception(e)
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/reject", response_model=BookingResponse)
def reject_booking(booking_id: str, data: BookingReject, stores: Stores = Depends(get_stores)):
    """拒绝预订"""
    try:
        booking = BookingService(stores).reject_booking(booking_id, data.reason)
    except DomainError as e:
        raise as_http_exception(e)
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/check-in", response_model=BookingResponse)
def check_in(booking_id: str, stores: Stores = Depends(get_stores)):
    """办理入住"""
    try:
        booking = BookingService(stores).check_in(booking_id)
    except DomainError as e:
        raise as_http_exception(e)
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/check-out", response_model=BookingResponse)
def check_out(booking_id: str, stores: Stores = Depends(get_stores)):
    """办理退房"""
    try:
        booking = BookingService(stores).check_out(booking_id)
    except DomainError as e:
        raise as_http_exception(e)
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    data: Optional[BookingCancel] = None,
    stores: Stores = Depends(get_stores)
):
    """取消预订"""
    try:
        booking = BookingService(stores).cancel_booking(booking_id, data.reason if data else None)
    except DomainError as e:
        raise as_http_exception(e)
    return BookingResponse.model_validate(booking)
