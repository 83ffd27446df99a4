from datetime import date, datetime

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from spotbook.app.core.clock import default_clock
from spotbook.app.services.booking_window import DEFAULT_WINDOW_MONTHS, check_reservation_date

REQUIRED_DATE_MESSAGE = "Reservation date is required"


class BookFormIn(BaseModel):
    # Validation context: {"now": datetime, "window_months": int}
    reservation_date: date | None = Field(default=None, validate_default=True)

    @field_validator("reservation_date", mode="before")
    @classmethod
    def drop_time_of_day(cls, value):
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator("reservation_date")
    @classmethod
    def within_booking_window(cls, value: date | None, info: ValidationInfo) -> date:
        if value is None:
            raise PydanticCustomError("date_required", REQUIRED_DATE_MESSAGE)

        context = info.context or {}
        now = context.get("now") or default_clock()
        months = context.get("window_months", DEFAULT_WINDOW_MONTHS)
        check = check_reservation_date(value, now, months=months)
        if not check.accepted:
            raise PydanticCustomError(f"date_{check.reason.value}", check.message)
        return value


class ReservationRequest(BaseModel):
    spot_id: str = Field(min_length=1)
    reservation_date: date

    @property
    def iso_date(self) -> str:
        return self.reservation_date.isoformat()

    def display_date(self, fmt: str = "%d/%m/%Y") -> str:
        return self.reservation_date.strftime(fmt)


def form_errors(exc: ValidationError) -> dict[str, str]:
    """Flatten a ValidationError into {field: first message}."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "__root__"
        errors.setdefault(field, error["msg"])
    return errors
