# quickschedule/db.py

from sqlmodel import SQLModel, Session, create_engine

from quickschedule import models  # noqa: F401  (registers the tables)
from quickschedule.config import get_settings

settings = get_settings()

# SQLite needs check_same_thread off to be shared with FastAPI's threadpool
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args=connect_args,
)


def create_db_and_tables(bind=engine) -> None:
    SQLModel.metadata.create_all(bind)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
