"""
SQLAlchemy 存储实现

RecordMapper 按 dataclass 字段名与表列属性一一对应完成映射；
明细列表（items）映射到子表，按明细 ID 合并更新，保持顺序。
派生字段（如合计）在每次写入时由记录计算后落库，只用于查询和排序。
"""
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar
import logging

from sqlalchemy.orm import Session

from roomops.core.errors import not_found
from roomops.core.store import Store

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ChildSpec:
    """子表映射：记录上的列表字段 -> 子表"""
    model: Type
    record_type: Type
    derived: Dict[str, Callable[[Any], Any]] = field(default_factory=dict)


@dataclass
class RecordMapper(Generic[T]):
    """记录 <-> 表行"""
    model: Type
    record_type: Type[T]
    children: Dict[str, ChildSpec] = field(default_factory=dict)
    derived: Dict[str, Callable[[T], Any]] = field(default_factory=dict)
    order_by: Optional[str] = None

    def to_record(self, row) -> T:
        values = {}
        for f in fields(self.record_type):
            spec = self.children.get(f.name)
            if spec is None:
                values[f.name] = getattr(row, f.name)
            else:
                values[f.name] = [
                    spec.record_type(**{cf.name: getattr(child, cf.name) for cf in fields(spec.record_type)})
                    for child in getattr(row, f.name)
                ]
        return self.record_type(**values)

    def apply(self, row, record: T) -> None:
        for f in fields(record):
            value = getattr(record, f.name)
            spec = self.children.get(f.name)
            if spec is None:
                setattr(row, f.name, value)
            else:
                setattr(row, f.name, self._merge_children(spec, getattr(row, f.name), value))
        for name, compute in self.derived.items():
            setattr(row, name, compute(record))

    @staticmethod
    def _merge_children(spec: ChildSpec, current: List, items: List) -> List:
        # 按 ID 复用已有子行，未出现的子行由 delete-orphan 级联删除
        existing = {child.id: child for child in current}
        merged = []
        for position, item in enumerate(items):
            child = existing.get(item.id) or spec.model(id=item.id)
            for cf in fields(item):
                setattr(child, cf.name, getattr(item, cf.name))
            child.position = position
            for name, compute in spec.derived.items():
                setattr(child, name, compute(item))
            merged.append(child)
        return merged


class SqlAlchemyStore(Store[T]):
    """基于会话的存储；只 flush，由 Stores.transaction 统一提交"""

    def __init__(self, db: Session, mapper: RecordMapper, entity: str = "record"):
        self.db = db
        self.mapper = mapper
        self.entity = entity

    def list(self, **criteria) -> List[T]:
        query = self.db.query(self.mapper.model)
        if criteria:
            query = query.filter_by(**criteria)
        if self.mapper.order_by:
            query = query.order_by(getattr(self.mapper.model, self.mapper.order_by))
        return [self.mapper.to_record(row) for row in query.all()]

    def get(self, record_id: str) -> Optional[T]:
        row = self.db.get(self.mapper.model, record_id)
        return self.mapper.to_record(row) if row is not None else None

    def insert(self, record: T) -> T:
        row = self.mapper.model()
        self.mapper.apply(row, record)
        self.db.add(row)
        self.db.flush()
        return record

    def update(self, record: T) -> T:
        row = self.db.get(self.mapper.model, record.id)
        if row is None:
            raise not_found(self.entity, record.id)
        self.mapper.apply(row, record)
        self.db.flush()
        return record

    def delete(self, record_id: str) -> bool:
        row = self.db.get(self.mapper.model, record_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        return True
