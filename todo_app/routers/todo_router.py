from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.database import get_db
from todo_app.dependencies import get_current_user_id, get_todo_service
from todo_app.schemas.todo import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    BulkUpdateRequest,
    TodoCreate,
    TodoListResponse,
    TodoOut,
    TodoStats,
    TodoUpdate,
)
from todo_app.services.todo_service import TodoService

router = APIRouter()


@router.get("", response_model=TodoListResponse)
async def list_todos(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    todos = await service.list_todos(db, user_id)
    return {"message": "Todos fetched successfully", "data": todos}


@router.post("", response_model=TodoOut, status_code=201)
async def create_todo(
    todo_in: TodoCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    return await service.create_todo(db, user_id, todo_in)


@router.get("/search", response_model=list[TodoOut])
async def search_todos(
    q: Optional[str] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    return await service.search_todos(db, user_id, q)


@router.get("/stats", response_model=TodoStats)
async def todo_stats(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    return await service.get_stats(db, user_id)


@router.put("/bulk", response_model=list[TodoOut])
async def bulk_update_todos(
    data: BulkUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    return await service.bulk_update(db, user_id, data.updates)


@router.delete("/bulk", response_model=BulkDeleteResponse)
async def bulk_delete_todos(
    data: BulkDeleteRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    deleted = await service.bulk_delete(db, user_id, data.ids)
    return {"message": "Todos deleted successfully", "deletedCount": deleted}


@router.get("/{todo_id}", response_model=TodoOut)
async def get_todo(
    todo_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    return await service.get_todo(db, user_id, todo_id)


@router.put("/{todo_id}", response_model=TodoOut)
async def update_todo(
    todo_id: int,
    patch: TodoUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    return await service.update_todo(db, user_id, todo_id, patch)


@router.delete("/{todo_id}", status_code=204)
async def delete_todo(
    todo_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    await service.delete_todo(db, user_id, todo_id)
    return Response(status_code=204)
