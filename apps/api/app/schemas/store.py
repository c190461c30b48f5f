import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class WeekdayHours(BaseModel):
    open: str = "10:00"
    close: str = "14:00"

    @field_validator("open", "close")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not _TIME_PATTERN.match(value):
            raise ValueError("time must be formatted as HH:MM")
        return value


class StoreHours(BaseModel):
    weekday: WeekdayHours = Field(default_factory=WeekdayHours)
    sunday: str = "ปิด"


class StoreStatusUpdate(CamelModel):
    is_open: bool = Field(alias="isOpen")
    message: str | None = Field(default="", max_length=500)
    close_time: str | None = Field(default=None, alias="closeTime")

    @field_validator("close_time")
    @classmethod
    def validate_close_time(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        if not _TIME_PATTERN.match(value):
            raise ValueError("closeTime must be formatted as HH:MM")
        return value


class StoreStatus(CamelModel):
    is_open: bool = Field(default=True, alias="isOpen")
    message: str = ""
    close_time: str | None = Field(default=None, alias="closeTime")


class StoreStatusResponse(StoreStatus):
    hours: StoreHours = Field(default_factory=StoreHours)


class StoreStatusUpdateResponse(StoreStatus):
    success: bool = True


class SpecialMenu(BaseModel):
    active: bool = False
    title: str = Field(default="", max_length=255)
    description: str = Field(default="", max_length=1000)
    emoji: str = Field(default="🍜", max_length=16)
