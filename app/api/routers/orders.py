# app/api/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import ConflictError, InvalidStatusError, NotFoundError, StoreUnavailableError
from app.domain.schemas import OrderCreate, OrderOut, OrderStatusUpdate
from app.services.order_service import OrderService
from app.utils.clock import Clock, get_clock

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session, clock: Clock):
    return OrderService(db, clock=clock)


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Tworzy zamówienie (pending) - magazyn rusza dopiero zmiana statusu.
    """
    svc = get_service(db, clock)
    try:
        return svc.create_order(
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
            customer_phone=payload.customer_phone,
            customer_address=payload.customer_address,
            description=payload.description,
            lines=payload.items,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    """
    Pobiera szczegóły zamówienia.
    """
    svc = get_service(db, clock)
    try:
        return svc.get_order(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Zmiana statusu. fulfilled zdejmuje stan, cancelled go oddaje.
    """
    svc = get_service(db, clock)
    try:
        return svc.update_status(order_id, payload.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError:
        raise HTTPException(status_code=409, detail="Order was modified concurrently, please try again")
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
