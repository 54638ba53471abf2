from pydantic import BaseModel


class Task(BaseModel):
    id: int
    title: str
    description: str
    completed: bool = False

    model_config = {"frozen": True}


class CreateTaskRequest(BaseModel):
    title: str
    description: str


class UpdateTaskRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    completed: bool | None = None
