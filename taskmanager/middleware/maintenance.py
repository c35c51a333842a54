"""Maintenance gate: answers every request with 503 while enabled."""
from fastapi import FastAPI, Request

from taskmanager.errors import ServiceUnavailable, error_response

MAINTENANCE_MESSAGE = "The site is under maintenance, please try again soon!"


def add_maintenance_middleware(app: FastAPI, enabled: bool) -> None:
    """Install the gate. The flag is fixed when the app is composed."""

    @app.middleware("http")
    async def maintenance_gate(request: Request, call_next):
        if enabled:
            return error_response(ServiceUnavailable(MAINTENANCE_MESSAGE))
        return await call_next(request)
