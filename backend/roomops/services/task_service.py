"""
任务服务 - 员工任务分配与状态
状态变更前按 TASK_STATE_MACHINE 校验
"""
from typing import List, Optional, Callable
from datetime import date, datetime
import logging

from roomops.core.errors import InvalidState, ValidationError
from roomops.core.event_bus import event_bus, Event
from roomops.core.store import new_id
from roomops.domain.task import StaffTask, TASK_STATE_MACHINE, PRIORITY_WEIGHT
from roomops.domain.validation import require_text, optional_text, parse_enum
from roomops.models.events import EventType, TaskEventData
from roomops.models.ontology import TaskPriority, TaskStatus
from roomops.stores import Stores

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "created_at": lambda t: t.created_at,
    # 无截止日期的排在最后
    "due_date": lambda t: (t.due_date is None, t.due_date or date.min),
    "priority": lambda t: PRIORITY_WEIGHT[t.priority],
    "title": lambda t: t.title.lower(),
    "assignee": lambda t: t.assignee.lower(),
    "status": lambda t: t.status.value,
}


class TaskService:
    """任务服务"""

    def __init__(self, stores: Stores, event_publisher: Callable[[Event], None] = None):
        self.stores = stores
        # 支持依赖注入事件发布器，便于测试
        self._publish_event = event_publisher or event_bus.publish

    def get_tasks(self, query: Optional[str] = None,
                  status: Optional[TaskStatus] = None,
                  sort: str = "created_at", descending: bool = True) -> List[StaffTask]:
        """获取任务列表，query 匹配标题、负责人、描述"""
        if sort not in SORT_FIELDS:
            raise ValidationError(f"不支持的排序字段: {sort}")
        criteria = {}
        if status is not None:
            criteria["status"] = parse_enum(TaskStatus, status, "status")
        tasks = self.stores.tasks.list(**criteria)
        if query:
            keyword = query.strip().lower()
            tasks = [
                t for t in tasks
                if keyword in t.title.lower()
                or keyword in t.assignee.lower()
                or keyword in (t.description or "").lower()
            ]
        return sorted(tasks, key=SORT_FIELDS[sort], reverse=descending)

    def get_task(self, task_id: str) -> StaffTask:
        return self.stores.tasks.require(task_id)

    def create_task(self, title: str, assignee: str, due_date: Optional[date] = None,
                    priority: TaskPriority = TaskPriority.MEDIUM,
                    description: Optional[str] = None) -> StaffTask:
        """创建任务（待办）"""
        task = StaffTask(
            id=new_id("task"),
            title=require_text(title, "任务标题"),
            assignee=require_text(assignee, "负责人"),
            due_date=due_date,
            priority=parse_enum(TaskPriority, priority, "priority"),
            description=optional_text(description),
        )
        with self.stores.transaction():
            self.stores.tasks.insert(task)

        self._publish(EventType.TASK_CREATED, task, None)
        return task

    def transition(self, task_id: str, status: TaskStatus) -> StaffTask:
        """变更任务状态"""
        target = parse_enum(TaskStatus, status, "status")
        task = self.get_task(task_id)
        old_status = task.status
        TASK_STATE_MACHINE.validate(old_status, target)

        task.status = target
        with self.stores.transaction():
            self.stores.tasks.update(task)

        logger.info(f"Task {task.id}: {old_status.value} -> {target.value}")
        self._publish(EventType.TASK_STATUS_CHANGED, task, old_status)
        return task

    def assign_task(self, task_id: str, assignee: str) -> StaffTask:
        """重新分配负责人"""
        assignee = require_text(assignee, "负责人")
        task = self._open_task(task_id, "分配")
        task.assignee = assignee
        with self.stores.transaction():
            self.stores.tasks.update(task)

        self._publish(EventType.TASK_ASSIGNED, task, task.status)
        return task

    def update_task(self, task_id: str, title: Optional[str] = None,
                    description: Optional[str] = None, due_date: Optional[date] = None,
                    priority: Optional[TaskPriority] = None) -> StaffTask:
        """更新任务信息"""
        task = self._open_task(task_id, "修改")
        if title is not None:
            task.title = require_text(title, "任务标题")
        if description is not None:
            task.description = optional_text(description)
        if due_date is not None:
            task.due_date = due_date
        if priority is not None:
            task.priority = parse_enum(TaskPriority, priority, "priority")

        with self.stores.transaction():
            self.stores.tasks.update(task)
        return task

    def delete_task(self, task_id: str) -> bool:
        task = self.get_task(task_id)
        with self.stores.transaction():
            self.stores.tasks.delete(task.id)
        logger.info(f"Task deleted: {task.id}")
        return True

    def get_task_summary(self) -> dict:
        """任务统计"""
        summary = {status.value: 0 for status in TaskStatus}
        tasks = self.stores.tasks.list()
        for task in tasks:
            summary[task.status.value] += 1
        summary["total"] = len(tasks)
        return summary

    def _open_task(self, task_id: str, action: str) -> StaffTask:
        task = self.get_task(task_id)
        if not task.is_open:
            raise InvalidState(
                f"状态为 {task.status.value} 的任务无法{action}",
                current=task.status.value, entity="StaffTask", entity_id=task.id,
            )
        return task

    def _publish(self, event_type: EventType, task: StaffTask,
                 old_status: Optional[TaskStatus]) -> None:
        self._publish_event(Event(
            event_type=event_type.value,
            timestamp=datetime.now(),
            data=TaskEventData(
                task_id=task.id,
                title=task.title,
                assignee=task.assignee,
                old_status=old_status.value if old_status else "",
                new_status=task.status.value,
            ).to_dict(),
            source="task_service"
        ))
