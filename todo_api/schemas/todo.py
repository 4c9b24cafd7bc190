from pydantic import BaseModel, ConfigDict, field_validator


class TodoBase(BaseModel):
    task: str

    @field_validator("task")
    @classmethod
    def task_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("task must not be empty")
        return v


class TodoCreate(TodoBase):
    pass


class TodoUpdate(TodoBase):
    completed: bool


class TodoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task: str
    completed: bool
