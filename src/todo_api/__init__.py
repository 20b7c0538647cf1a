"""
Todo API package.

A small FastAPI service exposing create/list operations over Todo items,
with a JWT-protected listing and automatic SQLite / SQL Server selection from
the configured connection string. The ASGI app lives in todo_api.main.
"""

__version__ = "0.1.0"
