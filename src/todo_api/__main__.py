"""Run the API with uvicorn: python -m todo_api"""
from __future__ import annotations

import os


def run_server() -> None:
    """Launch uvicorn against todo_api.main:app on HOST/PORT."""
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("todo_api.main:app", host=host, port=port, log_config=None)


if __name__ == "__main__":
    run_server()
