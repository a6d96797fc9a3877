"""
任务管理路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from roomops.core.errors import DomainError
from roomops.models.ontology import TaskStatus
from roomops.models.schemas import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskAssign, TaskResponse
from roomops.routers.errors import as_http_exception
from roomops.services.task_service import TaskService
from roomops.stores import Stores, get_stores

router = APIRouter(prefix="/tasks", tags=["任务管理"])


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    query: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    sort: str = "created_at",
    descending: bool = True,
    stores: Stores = Depends(get_stores)
):
    """获取任务列表"""
    try:
        tasks = TaskService(stores).get_tasks(query, status, sort, descending)
    except DomainError as e:
        raise as_http_exception(e)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.get("/summary")
def get_task_summary(stores: Stores = Depends(get_stores)):
    """任务统计"""
    return TaskService(stores).get_task_summary()


@router.post("", response_model=TaskResponse)
def create_task(data: TaskCreate, stores: Stores = Depends(get_stores)):
    """创建任务"""
    try:
        task = TaskService(stores).create_task(
            data.title, data.assignee, data.due_date, data.priority, data.description
        )
    except DomainError as e:
        raise as_http_exception(e)
    return TaskResponse.model_validate(task)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, stores: Stores = Depends(get_stores)):
    """获取任务详情"""
    try:
        return TaskResponse.model_validate(TaskService(stores).get_task(task_id))
    except DomainError as e:
        raise as_http_exception(e)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(task_id: str, data: TaskUpdate, stores: Stores = Depends(get_stores)):
    """更新任务"""
    try:
        task = TaskService(stores).update_task(
            task_id, data.title, data.description, data.due_date, data.priority
        )
    except DomainError as e:
        raise as_http_exception(e)
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}")
def delete_task(task_id: str, stores: Stores = Depends(get_stores)):
    """删除任务"""
    try:
        TaskService(stores).delete_task(task_id)
    except DomainError as e:
        raise as_http_exception(e)
    return {"message": "任务已删除"}


@router.post("/{task_id}/status", response_model=TaskResponse)
def update_task_status(task_id: str, data: TaskStatusUpdate, stores: Stores = Depends(get_stores)):
    """变更任务状态"""
    try:
        task = TaskService(stores).transition(task_id, data.status)
    except DomainError as e:
        raise as_http_exception(e)
    return TaskResponse.model_validate(task)


@router.post("/{task_id}/assign", response_model=TaskResponse)
def assign_task(task_id: str, data: TaskAssign, stores: Stores = Depends(get_stores)):
    """分配任务"""
    try:
        task = TaskService(stores).assign_task(task_id, data.assignee)
    except DomainError as e:
        raise as_http_exception(e)
    return TaskResponse.model_validate(task)
