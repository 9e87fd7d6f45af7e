from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class TodoCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class TodoUpdate(BaseModel):
    """Partial update; only fields that are not None are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class TodoOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    completed: bool
    owner_id: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TodoListResponse(BaseModel):
    message: str
    data: List[TodoOut]


class TodoStats(BaseModel):
    total: int
    completed: int
    pending: int
    completionRate: int


class BulkUpdateItem(BaseModel):
    id: int
    updates: TodoUpdate


class BulkUpdateRequest(BaseModel):
    updates: List[BulkUpdateItem] = []


class BulkDeleteRequest(BaseModel):
    ids: List[int] = []


class BulkDeleteResponse(BaseModel):
    message: str
    deletedCount: int
