# app/utils/clock.py
from datetime import datetime, timezone
from typing import Callable

#kazdy serwis dostaje zegar z zewnatrz, w testach podmieniamy na zamrozony
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_clock() -> Clock:
    """FastAPI dependency, nadpisywana w testach."""
    return utc_now
