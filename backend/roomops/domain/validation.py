"""
输入校验辅助函数
失败统一抛 ValidationError
"""
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from roomops.core.errors import ValidationError

E = TypeVar("E", bound=Enum)


def require_text(value: Optional[str], field_name: str) -> str:
    """必填字符串，去掉首尾空白"""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} 不能为空")
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def require_positive_int(value: Any, field_name: str) -> int:
    """正整数（bool 不算整数）"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} 必须是整数")
    if value <= 0:
        raise ValidationError(f"{field_name} 必须大于 0")
    return value


def require_amount(value: Any, field_name: str) -> Decimal:
    """非负金额，统一转为 Decimal"""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} 必须是数字")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} 必须是数字")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} 必须是数字")
    if amount < 0:
        raise ValidationError(f"{field_name} 不能为负数")
    return amount


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    """把字符串或枚举值转为枚举"""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} 取值无效: {value!r}（可选: {allowed}）")
