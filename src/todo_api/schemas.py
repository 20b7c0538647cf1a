from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    Any client-supplied id is ignored; ids are assigned by the database.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "done": False,
            }
        }
    )

    title: str = Field(default="", description="Title of the todo item")
    done: bool = Field(default=False, description="Completion status flag")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Buy groceries",
                "done": False,
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Title of the todo item")
    done: bool = Field(..., description="Completion status flag")


# PUBLIC_INTERFACE
class UserLogin(BaseModel):
    """
    Credentials posted to /auth/token.

    Both fields are optional at the schema level so that an incomplete pair is
    answered with 401 rather than a validation error.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"username": "demo", "password": "demo"}}
    )

    username: Optional[str] = Field(default=None, description="User identifier")
    password: Optional[str] = Field(default=None, description="User password")


# PUBLIC_INTERFACE
class TokenResponse(BaseModel):
    """
    Body returned by /auth/token on success.
    """

    token: str = Field(..., description="Signed bearer token (JWT)")
