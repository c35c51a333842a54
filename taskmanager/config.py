"""Runtime configuration for the Task Manager API."""
from typing import Optional
import os

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_JWT_SECRET = "dev-secret-change-me"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Externally supplied settings, handed to create_app at startup."""
    database_url: str = "sqlite:///./task_manager.db"
    jwt_secret: str = DEFAULT_JWT_SECRET
    sendgrid_api_key: Optional[str] = None
    mail_from: str = "noreply@example.com"
    port: int = 8000
    maintenance_mode: bool = False
    environment: str = "development"
    frontend_url: str = "http://localhost:3000"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and a .env file if present)."""
        load_dotenv()
        return cls(
            database_url=os.environ.get("DATABASE_URL", "sqlite:///./task_manager.db"),
            jwt_secret=os.environ.get("JWT_SECRET", DEFAULT_JWT_SECRET),
            sendgrid_api_key=os.environ.get("SENDGRID_API_KEY") or None,
            mail_from=os.environ.get("MAIL_FROM", "noreply@example.com"),
            port=int(os.environ.get("PORT", "8000")),
            maintenance_mode=_env_flag("MAINTENANCE_MODE"),
            environment=os.environ.get("ENVIRONMENT", "development"),
            frontend_url=os.environ.get("FRONTEND_URL", "http://localhost:3000"),
        )
