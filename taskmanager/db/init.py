"""Initialize database tables."""
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

# Imported for their side effect of registering tables on SQLModel.metadata
from taskmanager.models.user import User, UserToken  # noqa: F401
from taskmanager.models.task import Task  # noqa: F401
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)


def init_db(engine: Engine) -> None:
    """Create all tables in the database."""
    logger.info("Creating all tables")
    SQLModel.metadata.create_all(engine)
    logger.info("Tables created successfully")


if __name__ == "__main__":
    from taskmanager.config import Settings
    from taskmanager.db.config import create_db_engine

    init_db(create_db_engine(Settings.from_env().database_url))
