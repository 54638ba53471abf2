import re

from fastapi import APIRouter, Depends, Request

from taskdesk.exceptions import NotFoundError, ValidationError
from taskdesk.models.common import ApiResponse
from taskdesk.models.tasks import CreateTaskRequest, Task, UpdateTaskRequest
from taskdesk.services.task_store import TaskStore

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_task_store(request: Request) -> TaskStore:
    return request.app.state.task_store


_TASK_ID_RE = re.compile(r"-?[0-9]+")


def _parse_task_id(raw: str) -> int:
    # ASCII digits only; int() would also take "+1", " 1", "1_0" and non-ASCII digits
    if not _TASK_ID_RE.fullmatch(raw):
        raise ValidationError("Invalid task ID")
    return int(raw)


@router.get("")
def list_tasks(store: TaskStore = Depends(get_task_store)) -> ApiResponse[list[Task]]:
    return ApiResponse(success=True, data=store.list())


@router.get("/{task_id}")
def get_task(task_id: str, store: TaskStore = Depends(get_task_store)) -> ApiResponse[Task]:
    task = store.get(_parse_task_id(task_id))
    if task is None:
        raise NotFoundError("Task not found")
    return ApiResponse(success=True, data=task)


@router.post("", status_code=201)
def create_task(request: CreateTaskRequest, store: TaskStore = Depends(get_task_store)) -> ApiResponse[Task]:
    task = store.create(request)
    return ApiResponse(success=True, data=task, message="Task created successfully")


@router.put("/{task_id}")
def update_task(
    task_id: str, request: UpdateTaskRequest, store: TaskStore = Depends(get_task_store),
) -> ApiResponse[Task]:
    task = store.update(_parse_task_id(task_id), request)
    return ApiResponse(success=True, data=task, message="Task updated successfully")


@router.delete("/{task_id}")
def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)) -> ApiResponse[None]:
    if not store.delete(_parse_task_id(task_id)):
        raise NotFoundError("Task not found")
    return ApiResponse(success=True, message="Task deleted successfully")
