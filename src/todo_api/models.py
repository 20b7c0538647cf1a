from __future__ import annotations

from sqlalchemy import Boolean, Column, Integer, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


# PUBLIC_INTERFACE
class Todo(Base):
    """
    Table mapping for a Todo item.

    Fields:
    - id: auto-assigned integer primary key, never changed after insert
    - title: free text, empty string when the client omits it
    - done: completion flag
    """

    __tablename__ = "todos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False, default="")
    done = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"Todo(id={self.id!r}, title={self.title!r}, done={self.done!r})"
