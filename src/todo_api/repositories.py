from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from .db import get_db
from .models import Todo
from .schemas import TodoCreate


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage."""

    @abstractmethod
    def create(self, data: TodoCreate) -> Todo:
        """Persist a new Todo and return it with its assigned id."""

    @abstractmethod
    def list(self) -> List[Todo]:
        """Return every stored Todo in id order without modifying anything."""


class SqlAlchemyRepository(Repository):
    """
    Repository backed by a SQLAlchemy session; works for both SQLite and SQL Server.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, data: TodoCreate) -> Todo:
        todo = Todo(title=data.title, done=data.done)
        self._session.add(todo)
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        self._session.refresh(todo)
        return todo

    def list(self) -> List[Todo]:
        return list(self._session.scalars(select(Todo).order_by(Todo.id)))


# PUBLIC_INTERFACE
def get_repository(db: Session = Depends(get_db)) -> Repository:
    """Dependency returning a repository bound to the request's session."""
    return SqlAlchemyRepository(db)
