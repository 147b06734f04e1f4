#app/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    StoreUnavailableError,
)
from app.domain.schemas import CartOut, CartSummary, ReservationIn, ReservationQuantityIn
from app.services.cart_service import CartService
from app.utils.clock import Clock, get_clock

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session, clock: Clock):
    return CartService(db=db, clock=clock)


def _read_cart(svc: CartService, user_id: str) -> CartOut:
    try:
        cart = svc.get_cart(user_id)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    return cart


@router.get("/{user_id}", response_model=CartOut)
def get_cart(user_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return _read_cart(get_service(db, clock), user_id)


@router.get("/{user_id}/summary", response_model=CartSummary)
def get_cart_summary(user_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    svc = get_service(db, clock)
    try:
        cart = svc.get_cart(user_id)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    # brak koszyka = puste podsumowanie
    return cart.summary if cart else CartSummary()


@router.post("/{user_id}/items", response_model=CartOut, status_code=201)
def add_item(
    user_id: str,
    payload: ReservationIn,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    svc = get_service(db, clock)
    try:
        svc.add_reservation(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
            snapshot=payload.snapshot,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError:
        raise HTTPException(status_code=409, detail="Cart was modified concurrently, please try again")
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _read_cart(svc, user_id)


@router.patch("/{user_id}/items/{cart_item_id}", response_model=CartOut)
def update_item(
    user_id: str,
    cart_item_id: str,
    payload: ReservationQuantityIn,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    svc = get_service(db, clock)
    try:
        svc.update_reservation_quantity(user_id, cart_item_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError:
        raise HTTPException(status_code=409, detail="Cart was modified concurrently, please try again")
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _read_cart(svc, user_id)


@router.delete("/{user_id}/items/{cart_item_id}", response_model=CartOut)
def remove_item(
    user_id: str,
    cart_item_id: str,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    svc = get_service(db, clock)
    try:
        svc.remove_reservation(user_id, cart_item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError:
        raise HTTPException(status_code=409, detail="Cart was modified concurrently, please try again")
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _read_cart(svc, user_id)


@router.delete("/{user_id}/items", status_code=204)
def clear_cart(user_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    svc = get_service(db, clock)
    try:
        svc.clear_cart(user_id)
    except ConflictError:
        raise HTTPException(status_code=409, detail="Cart was modified concurrently, please try again")
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return Response(status_code=204)
