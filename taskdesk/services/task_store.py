"""In-memory task store.

Thread-safety:
- create/update/delete are serialized by a single lock
- the task sequence is copy-on-write: each mutation builds a new tuple and
  publishes it with one reference assignment, so list/get never take the lock
  and never observe a half-applied mutation
"""

import logging
import threading

from taskdesk.exceptions import NotFoundError, ValidationError
from taskdesk.models.tasks import CreateTaskRequest, Task, UpdateTaskRequest

logger = logging.getLogger(__name__)


class TaskStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tasks: tuple[Task, ...] = ()
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._tasks)

    def list(self) -> list[Task]:
        """Snapshot of all tasks in creation order."""
        return list(self._tasks)

    def get(self, task_id: int) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def create(self, request: CreateTaskRequest) -> Task:
        """Validate the request, allocate the next id and append a new task."""
        if not request.title:
            raise ValidationError("Field 'title' must not be empty")
        if not request.description:
            raise ValidationError("Field 'description' must not be empty")

        with self._lock:
            task = Task(id=self._next_id, title=request.title, description=request.description)
            self._next_id += 1
            self._tasks = self._tasks + (task,)
        logger.info("Created task id=%d", task.id)
        return task

    def update(self, task_id: int, request: UpdateTaskRequest) -> Task:
        """Merge the fields present in the request onto the task. Absent fields keep their value."""
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        with self._lock:
            tasks = list(self._tasks)
            for index, current in enumerate(tasks):
                if current.id == task_id:
                    break
            else:
                raise NotFoundError("Task not found")
            if "title" in changes and not changes["title"]:
                raise ValidationError("Field 'title' must not be empty")
            updated = current.model_copy(update=changes)
            tasks[index] = updated
            self._tasks = tuple(tasks)
        logger.info("Updated task id=%d fields=%s", task_id, sorted(changes))
        return updated

    def delete(self, task_id: int) -> bool:
        """Remove the task with the given id. Returns whether anything was removed."""
        with self._lock:
            remaining = tuple(t for t in self._tasks if t.id != task_id)
            removed = len(remaining) != len(self._tasks)
            self._tasks = remaining
        if removed:
            logger.info("Deleted task id=%d", task_id)
        return removed
