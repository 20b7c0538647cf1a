from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..auth import get_bearer_auth_dependency
from ..repositories import Repository, get_repository
from ..schemas import TodoCreate, TodoOut

router = APIRouter(tags=["todos"])

require_bearer = get_bearer_auth_dependency()


# PUBLIC_INTERFACE
@router.get(
    "/todos",
    response_model=List[TodoOut],
    name="GetTodos",
    summary="List Todos",
    description="Return every stored Todo item. Public, no authentication required.",
)
def list_todos(repo: Repository = Depends(get_repository)) -> List[TodoOut]:
    """
    List all todos.
    """
    return [TodoOut.model_validate(t) for t in repo.list()]


# PUBLIC_INTERFACE
@router.post(
    "/todos",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    name="CreateTodo",
    summary="Create Todo",
    description="Create a new Todo item and return the stored resource with its id.",
    responses={
        201: {"description": "Todo created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_todo(
    payload: TodoCreate,
    response: Response,
    repo: Repository = Depends(get_repository),
) -> TodoOut:
    """
    Create a new Todo. The Location header points at the todo collection.
    """
    created = TodoOut.model_validate(repo.create(payload))
    response.headers["Location"] = "/todos/"
    return created


# PUBLIC_INTERFACE
@router.get(
    "/secure/todos",
    response_model=List[TodoOut],
    name="GetSecureTodos",
    summary="List Todos (authenticated)",
    description="Same listing as GET /todos, but requires a bearer token from /auth/token.",
    responses={401: {"description": "Missing, invalid or expired bearer token"}},
    dependencies=[Depends(require_bearer)],
)
def list_secure_todos(repo: Repository = Depends(get_repository)) -> List[TodoOut]:
    return [TodoOut.model_validate(t) for t in repo.list()]
