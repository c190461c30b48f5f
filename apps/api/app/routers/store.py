from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import AuthContext, require_admin
from app.db.session import get_db
from app.dependencies import EventPublisher, get_event_publisher
from app.schemas.store import (
    SpecialMenu,
    StoreHours,
    StoreStatusResponse,
    StoreStatusUpdate,
    StoreStatusUpdateResponse,
)
from app.services.store_settings_service import (
    get_special_menu,
    get_store_hours,
    get_store_status,
    set_special_menu,
    set_store_hours,
    set_store_status,
)

router = APIRouter(prefix="/api/store", tags=["store"])


@router.get("/status", response_model=StoreStatusResponse, summary="Get store open/closed status")
def get_status_endpoint(db: Session = Depends(get_db)) -> StoreStatusResponse:
    current = get_store_status(db)
    return StoreStatusResponse(
        is_open=current.is_open,
        message=current.message,
        close_time=current.close_time,
        hours=get_store_hours(db),
    )


@router.post(
    "/status",
    response_model=StoreStatusUpdateResponse,
    summary="Open or close the store",
)
def set_status_endpoint(
    payload: StoreStatusUpdate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    _auth: AuthContext = Depends(require_admin),
) -> StoreStatusUpdateResponse:
    updated = set_store_status(db, payload, publisher)
    return StoreStatusUpdateResponse(
        is_open=updated.is_open,
        message=updated.message,
        close_time=updated.close_time,
    )


@router.get("/special-menu", response_model=SpecialMenu, summary="Get today's special menu")
def get_special_menu_endpoint(db: Session = Depends(get_db)) -> SpecialMenu:
    return get_special_menu(db)


@router.post("/special-menu", response_model=SpecialMenu, summary="Update today's special menu")
def set_special_menu_endpoint(
    payload: SpecialMenu,
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> SpecialMenu:
    return set_special_menu(db, payload)


@router.get("/hours", response_model=StoreHours, summary="Get opening hours")
def get_hours_endpoint(db: Session = Depends(get_db)) -> StoreHours:
    return get_store_hours(db)


@router.post("/hours", response_model=StoreHours, summary="Update opening hours")
def set_hours_endpoint(
    payload: StoreHours,
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> StoreHours:
    return set_store_hours(db, payload)
