# app/data/transaction.py
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.domain.errors import ConflictError, StoreUnavailableError
from app.utils.logging import get_logger
from app.utils.retry import DEFAULT_RETRY_POLICY, RetryPolicy, transaction_retry

logger = get_logger(__name__)

T = TypeVar("T")


def run_transaction(
    db: Session,
    fn: Callable[..., T],
    *args,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    **kwargs,
) -> T:
    """
    Read-modify-write w jednej transakcji z optimistic lockingiem.

    fn czyta dokumenty, liczy nowy stan i zapisuje go przez
    UPDATE ... WHERE version = <odczytana wersja>. Jesli ktorys zapis
    trafi w 0 wierszy, fn rzuca ConflictError, transakcja jest wycofywana
    i cala funkcja leci od nowa (wg policy). Po wyczerpaniu prob
    wolajacy dostaje ConflictError.
    """

    @transaction_retry(policy)
    def attempt() -> T:
        #kazda proba czyta swieze wiersze, nie to co zostalo w identity map
        db.expire_all()
        try:
            result = fn(*args, **kwargs)
            db.commit()
            return result
        except ConflictError:
            db.rollback()
            logger.info(f"Version conflict in {fn.__name__}, rolling back")
            raise
        except (IntegrityError, StaleDataError) as e:
            #dwa requesty tworza ten sam koszyk naraz / wiersz zniknal pod nami
            db.rollback()
            raise ConflictError() from e
        except OperationalError as e:
            db.rollback()
            logger.error(f"Store unavailable during {fn.__name__}: {e}")
            raise StoreUnavailableError("Store unavailable, please retry") from e
        except Exception:
            db.rollback()
            raise

    return attempt()
