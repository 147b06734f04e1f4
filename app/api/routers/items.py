# app/api/routers/items.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    StoreUnavailableError,
)
from app.domain.schemas import ItemCreate, ItemOut, LowStockItemOut, StockAdjustIn
from app.services.item_service import ItemService
from app.utils.clock import Clock, get_clock
from app.utils.settings import LOW_STOCK_THRESHOLD

router = APIRouter(prefix="/items", tags=["items"])


def get_service(db: Session, clock: Clock):
    return ItemService(db, clock=clock)


@router.post("/", response_model=ItemOut, status_code=201)
def create_item(payload: ItemCreate, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    svc = get_service(db, clock)
    return svc.create_item(**payload.model_dump())


@router.get("/", response_model=List[ItemOut])
def list_items(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return get_service(db, clock).list_items()


# przed /{item_id} zeby "low-stock" nie poszlo jako id
@router.get("/low-stock", response_model=List[LowStockItemOut])
def list_low_stock(
    threshold: int = Query(LOW_STOCK_THRESHOLD, ge=0),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return get_service(db, clock).list_low_stock(threshold)


@router.get("/{item_id}", response_model=ItemOut)
def get_item(item_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    svc = get_service(db, clock)
    try:
        return svc.get_item(item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{item_id}/stock", response_model=ItemOut)
def adjust_stock(
    item_id: str,
    payload: StockAdjustIn,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    svc = get_service(db, clock)
    try:
        return svc.adjust_stock(item_id, payload.delta)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError:
        raise HTTPException(status_code=409, detail="Item was modified concurrently, please try again")
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    svc = get_service(db, clock)
    try:
        svc.delete_item(item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)
