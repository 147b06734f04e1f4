# app/data/database.py
from datetime import timezone

from sqlalchemy import DateTime, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from app.utils.settings import DATABASE_URL, DB_POOL_TIMEOUT_SECONDS, DB_STATEMENT_TIMEOUT_SECONDS


def _engine_kwargs(url: str) -> dict:
    #limit na jedna probe transakcji, stop_after_delay w retry pilnuje tylko budzetu prob
    if not url.startswith("sqlite"):
        return {
            "pool_pre_ping": True,
            "pool_timeout": DB_POOL_TIMEOUT_SECONDS,
            "connect_args": {"options": f"-c statement_timeout={int(DB_STATEMENT_TIMEOUT_SECONDS * 1000)}"},
        }
    kwargs = {"connect_args": {"check_same_thread": False, "timeout": DB_STATEMENT_TIMEOUT_SECONDS}}
    #baza w pamieci - jedno polaczenie dla calego procesu
    if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=True, expire_on_commit=True)
Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """Zawsze aware UTC, takze na sqlite ktory gubi strefe."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetime not allowed, use an aware UTC timestamp")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def init_db() -> None:
    #import modeli zeby zarejestrowaly sie w Base.metadata
    import app.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
