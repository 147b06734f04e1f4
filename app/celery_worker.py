# app/celery_worker.py
from celery import Celery

from app.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, SWEEP_INTERVAL_SECONDS

celery_app = Celery(
    "farmshop",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = ("app.tasks.expire",)

# Konfiguracja beat schedule
celery_app.conf.beat_schedule = {
    "sweep-expired-reservations": {
        "task": "app.tasks.expire.sweep_expired_reservations_task",
        "schedule": float(SWEEP_INTERVAL_SECONDS),  # domyslnie co godzine
    },
}

celery_app.conf.timezone = "UTC"
