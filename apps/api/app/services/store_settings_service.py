from typing import TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.dependencies import EventPublisher
from app.models.store_setting import StoreSetting
from app.observability import log_event
from app.schemas.store import SpecialMenu, StoreHours, StoreStatus, StoreStatusUpdate
from app.services.broadcast import STORE_STATUS_CHANGED, STORE_STATUS_ROOM

STATUS_KEY = "status"
HOURS_KEY = "hours"
SPECIAL_MENU_KEY = "special_menu"

SettingModel = TypeVar("SettingModel", bound=BaseModel)


def _read(db: Session, key: str, model: type[SettingModel]) -> SettingModel:
    row = db.get(StoreSetting, key)
    if row is None:
        return model()
    return model.model_validate(row.value)


def _write(db: Session, key: str, value: BaseModel) -> None:
    payload = value.model_dump(mode="json", by_alias=True)
    row = db.get(StoreSetting, key)
    if row is None:
        db.add(StoreSetting(key=key, value=payload))
    else:
        row.value = payload
    db.commit()


def get_store_status(db: Session) -> StoreStatus:
    return _read(db, STATUS_KEY, StoreStatus)


def set_store_status(
    db: Session,
    update: StoreStatusUpdate,
    publisher: EventPublisher,
) -> StoreStatus:
    status_value = StoreStatus(
        is_open=update.is_open,
        message=update.message or "",
        close_time=update.close_time,
    )
    _write(db, STATUS_KEY, status_value)

    log_event(f"store_status_changed:{'open' if status_value.is_open else 'closed'}")
    publisher.publish(
        STORE_STATUS_ROOM,
        STORE_STATUS_CHANGED,
        status_value.model_dump(mode="json", by_alias=True),
    )
    return status_value


def get_store_hours(db: Session) -> StoreHours:
    return _read(db, HOURS_KEY, StoreHours)


def set_store_hours(db: Session, hours: StoreHours) -> StoreHours:
    _write(db, HOURS_KEY, hours)
    return hours


def get_special_menu(db: Session) -> SpecialMenu:
    return _read(db, SPECIAL_MENU_KEY, SpecialMenu)


def set_special_menu(db: Session, menu: SpecialMenu) -> SpecialMenu:
    _write(db, SPECIAL_MENU_KEY, menu)
    log_event(f"special_menu_updated:{'active' if menu.active else 'inactive'}")
    return menu
