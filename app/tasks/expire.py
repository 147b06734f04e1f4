# app/tasks/expire.py
import uuid

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.services.expiry_service import ExpiryService
from app.services.lock_service import LockService
from app.utils.clock import Clock, utc_now
from app.utils.logging import get_logger
from app.utils.settings import SWEEP_LOCK_TTL_SECONDS

logger = get_logger(__name__)

SWEEP_LOCK_NAME = "cart-sweep"


def run_sweep(db, lock_service: LockService, clock: Clock = utc_now) -> dict:
    owner = uuid.uuid4().hex
    if not lock_service.acquire(SWEEP_LOCK_NAME, owner, ttl=SWEEP_LOCK_TTL_SECONDS):
        logger.info("Another sweep is running, skipping this pass")
        return {"skipped": True}

    try:
        report = ExpiryService(db, clock=clock).sweep_all()
    finally:
        lock_service.release(SWEEP_LOCK_NAME, owner)

    return {"skipped": False, **report.model_dump()}


@celery_app.task(name="app.tasks.expire.sweep_expired_reservations_task")
def sweep_expired_reservations_task():
    logger.info("Sweep expired reservations task started")

    db = SessionLocal()
    try:
        return run_sweep(db, LockService())
    finally:
        db.close()
