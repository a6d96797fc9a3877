"""
领域错误 -> HTTP 错误
"""
from fastapi import HTTPException, status

from roomops.core.errors import (
    DomainError, NotFound, ValidationError, InvalidMethod,
    InvalidTransition, RoomUnavailable, RoomInUse, AlreadyPaid,
)

# 按顺序匹配，子类需排在父类之前
STATUS_CODES = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidMethod, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidTransition, status.HTTP_409_CONFLICT),
    (RoomUnavailable, status.HTTP_409_CONFLICT),
    (RoomInUse, status.HTTP_409_CONFLICT),
    (AlreadyPaid, status.HTTP_409_CONFLICT),
)


def as_http_exception(error: DomainError) -> HTTPException:
    """detail 为错误描述，X-Error-Code 头携带错误码"""
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            break
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return HTTPException(
        status_code=status_code,
        detail=error.message,
        headers={"X-Error-Code": error.code},
    )
