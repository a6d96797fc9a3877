"""
存储抽象 - 每类实体一个 Store

服务只依赖 Store 接口（list/get/insert/update/delete），
生产环境由 SqlAlchemyStore 实现，测试和演示使用 InMemoryStore。
"""
from abc import ABC, abstractmethod
from typing import Dict, Generic, List, Optional, TypeVar
import copy
import threading
import uuid

from roomops.core.errors import not_found

T = TypeVar("T")


def new_id(prefix: str) -> str:
    """生成记录 ID，如 bk_3f9a0c1d2e4b"""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class Store(ABC, Generic[T]):
    """实体存储接口"""

    entity: str = "record"

    @abstractmethod
    def list(self, **criteria) -> List[T]:
        """列出记录，criteria 为字段相等过滤"""

    @abstractmethod
    def get(self, record_id: str) -> Optional[T]:
        """按 ID 获取，不存在返回 None"""

    @abstractmethod
    def insert(self, record: T) -> T:
        """新增记录"""

    @abstractmethod
    def update(self, record: T) -> T:
        """整体覆盖已有记录"""

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """删除记录，返回是否存在"""

    def require(self, record_id: str) -> T:
        """获取记录，不存在抛 NotFound"""
        record = self.get(record_id)
        if record is None:
            raise not_found(self.entity, record_id)
        return record


class InMemoryStore(Store[T]):
    """
    进程内存存储

    读写都做深拷贝：调用方修改拿到的记录后必须 update 才会生效，
    与数据库存储的行为一致。
    """

    def __init__(self, entity: str = "record"):
        self.entity = entity
        self._records: Dict[str, T] = {}
        self._lock = threading.Lock()

    def list(self, **criteria) -> List[T]:
        with self._lock:
            records = list(self._records.values())
        return [
            copy.deepcopy(r) for r in records
            if all(getattr(r, key) == value for key, value in criteria.items())
        ]

    def get(self, record_id: str) -> Optional[T]:
        with self._lock:
            record = self._records.get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def insert(self, record: T) -> T:
        with self._lock:
            if record.id in self._records:
                raise ValueError(f"{self.entity} {record.id} 已存在")
            self._records[record.id] = copy.deepcopy(record)
        return record

    def update(self, record: T) -> T:
        with self._lock:
            if record.id not in self._records:
                raise not_found(self.entity, record.id)
            self._records[record.id] = copy.deepcopy(record)
        return record

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["Store", "InMemoryStore", "new_id"]
