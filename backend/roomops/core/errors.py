"""
领域错误分类

所有错误都是可恢复的本地错误，由调用方（路由层）转换为用户可见的提示。
继承 ValueError，与服务层 `raise ValueError(...)` 的约定保持兼容。
"""
from typing import Optional


class DomainError(ValueError):
    """领域错误基类"""

    code = "domain_error"

    def __init__(self, message: str, *, entity: Optional[str] = None,
                 entity_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity = entity
        self.entity_id = entity_id

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "entity": self.entity,
            "entity_id": self.entity_id,
        }


class ValidationError(DomainError):
    """输入不合法：缺少必填字段、数量非正、日期区间错误等"""
    code = "validation_error"


class DateRangeInvalid(ValidationError):
    """结束日期不晚于开始日期"""
    code = "date_range_invalid"


class InvalidTransition(DomainError):
    """状态机不允许的转换"""
    code = "invalid_transition"

    def __init__(self, message: str, *, current: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current = current
        self.target = target

    def to_dict(self) -> dict:
        result = super().to_dict()
        result.update(current=self.current, target=self.target)
        return result


class InvalidState(InvalidTransition):
    """操作要求的前置状态不满足（如审批非待审批的预订）"""
    code = "invalid_state"


class RoomUnavailable(DomainError):
    """房间在该时段已被占用或不可用"""
    code = "room_unavailable"


class RoomInUse(DomainError):
    """房间仍被有效预订引用"""
    code = "room_in_use"


class NotFound(DomainError):
    """引用的记录不存在"""
    code = "not_found"


class AlreadyPaid(DomainError):
    """账单已支付"""
    code = "already_paid"


class InvalidMethod(DomainError):
    """不支持的支付方式"""
    code = "invalid_method"


def not_found(entity: str, entity_id: str) -> NotFound:
    return NotFound(f"{entity} {entity_id} 不存在", entity=entity, entity_id=entity_id)


__all__ = [
    "DomainError",
    "ValidationError",
    "DateRangeInvalid",
    "InvalidTransition",
    "InvalidState",
    "RoomUnavailable",
    "RoomInUse",
    "NotFound",
    "AlreadyPaid",
    "InvalidMethod",
    "not_found",
]
