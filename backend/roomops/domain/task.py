"""
StaffTask 记录与任务状态机

todo → in_progress → done / cancelled，todo 也可直接取消；不支持重新打开。
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from roomops.core.state_machine import build_state_machine
from roomops.models.ontology import TaskPriority, TaskStatus


TASK_STATE_MACHINE = build_state_machine(
    "StaffTask",
    states=list(TaskStatus),
    edges=[
        (TaskStatus.TODO, TaskStatus.IN_PROGRESS, "start"),
        (TaskStatus.TODO, TaskStatus.CANCELLED, "cancel"),
        (TaskStatus.IN_PROGRESS, TaskStatus.DONE, "complete"),
        (TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED, "cancel"),
    ],
    initial_state=TaskStatus.TODO,
    final_states=[TaskStatus.DONE, TaskStatus.CANCELLED],
)

PRIORITY_WEIGHT = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
}


@dataclass
class StaffTask:
    """员工任务"""
    id: str
    title: str
    assignee: str
    due_date: Optional[date] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_open(self) -> bool:
        return not TASK_STATE_MACHINE.is_final(self.status)
