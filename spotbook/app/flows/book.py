"""Booking form: date selection, validation and the reservation submission flow."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable

import httpx
from fastapi import status
from pydantic import ValidationError

from spotbook.app.core.clock import default_clock
from spotbook.app.core.config import settings
from spotbook.app.core.redis_client import KeyValueStore, get_stored_user
from spotbook.app.flows.navigation import Navigator, Notifier, Route
from spotbook.app.flows.schemas import BookFormIn, ReservationRequest, form_errors
from spotbook.app.services.booking_window import booking_window, today_for
from spotbook.app.services.bookings import request_booking

logger = logging.getLogger(__name__)

DATE_FIELD = "reservation_date"
SUCCESS_TITLE = "Success!"
ERROR_TITLE = "Error"


class SubmissionStatus(str, Enum):
    SUCCESS = "success"
    INVALID_DATE = "invalid_date"
    NOT_LOGGED_IN = "not_logged_in"
    BAD_REQUEST = "bad_request"
    SESSION_EXPIRED = "session_expired"
    CONFLICT = "conflict"
    FAILED = "failed"


SUBMISSION_MESSAGES: dict[SubmissionStatus, str] = {
    SubmissionStatus.NOT_LOGGED_IN: "User not found. Please log in again.",
    SubmissionStatus.BAD_REQUEST: "Invalid data. Check the date and try again.",
    SubmissionStatus.SESSION_EXPIRED: "Session expired. Please log in again.",
    SubmissionStatus.CONFLICT: "You already have a reservation for this spot on this date.",
    SubmissionStatus.FAILED: "Could not submit the request. Try again.",
}

_STATUS_BY_HTTP_CODE: dict[int, SubmissionStatus] = {
    status.HTTP_400_BAD_REQUEST: SubmissionStatus.BAD_REQUEST,
    status.HTTP_401_UNAUTHORIZED: SubmissionStatus.SESSION_EXPIRED,
    status.HTTP_409_CONFLICT: SubmissionStatus.CONFLICT,
}


@dataclass(frozen=True)
class SubmissionOutcome:
    status: SubmissionStatus
    message: str
    route: Route | None = None

    @property
    def ok(self) -> bool:
        return self.status is SubmissionStatus.SUCCESS


def outcome_for_status(status_code: int | None) -> SubmissionOutcome:
    """Map a failed response status (None when no response arrived) to an outcome."""
    result = _STATUS_BY_HTTP_CODE.get(status_code, SubmissionStatus.FAILED)
    route = Route.LOGIN if result is SubmissionStatus.SESSION_EXPIRED else None
    return SubmissionOutcome(result, SUBMISSION_MESSAGES[result], route)


class BookingForm:
    """State and behaviour of one booking form instance for a single spot.

    The form owns three pieces of state: the selected date, the loading flag
    and the picker visibility flag. Storage, navigation, alerts, the HTTP
    client and the clock are supplied by the caller.
    """

    def __init__(
        self,
        spot_id: str,
        *,
        client: httpx.AsyncClient,
        store: KeyValueStore,
        navigator: Navigator,
        notifier: Notifier,
        clock: Callable[[], datetime] = default_clock,
        window_months: int | None = None,
        platform: str | None = None,
        date_format: str | None = None,
        storage_key: str | None = None,
    ) -> None:
        self.spot_id = spot_id
        self._client = client
        self._store = store
        self._navigator = navigator
        self._notifier = notifier
        self._clock = clock
        self._window_months = settings.BOOKING_WINDOW_MONTHS if window_months is None else window_months
        self._platform = settings.PLATFORM if platform is None else platform
        self._date_format = settings.DISPLAY_DATE_FORMAT if date_format is None else date_format
        self._storage_key = settings.USER_STORAGE_KEY if storage_key is None else storage_key

        self.reservation_date: date = self.today()
        self.errors: dict[str, str] = {}
        self.is_loading = False
        self.show_date_picker = False

        self._submitted_once = False
        self._closed = False
        self._inflight: asyncio.Task | None = None

    # -- date selection -------------------------------------------------

    def today(self) -> date:
        return today_for(self._clock())

    def picker_bounds(self) -> tuple[date, date]:
        """Range offered by the date picker; identical to the validation window."""
        return booking_window(self._clock(), months=self._window_months)

    @property
    def display_date(self) -> str:
        return self.reservation_date.strftime(self._date_format)

    @property
    def can_submit(self) -> bool:
        return not self.is_loading and not self._closed

    def open_date_picker(self) -> None:
        if self.is_loading:
            return
        self.show_date_picker = True

    def on_date_change(self, selected: date | datetime | None) -> None:
        """Handle a picker event; ``selected`` is None when the picker was dismissed."""
        self.show_date_picker = self._platform == "ios"
        if selected is None:
            return
        self.reservation_date = selected.date() if isinstance(selected, datetime) else selected
        if self._submitted_once:
            self.validate()

    def validate(self) -> ReservationRequest | None:
        """Validate the selected date, refreshing ``errors``."""
        try:
            form = BookFormIn.model_validate(
                {DATE_FIELD: self.reservation_date},
                context={"now": self._clock(), "window_months": self._window_months},
            )
        except ValidationError as exc:
            self.errors = form_errors(exc)
            return None

        self.errors = {}
        return ReservationRequest(spot_id=self.spot_id, reservation_date=form.reservation_date)

    def reset(self) -> None:
        self.reservation_date = self.today()
        self.errors = {}
        self.show_date_picker = False
        self._submitted_once = False

    def cancel(self) -> bool:
        """Leave the form for the listing screen; ignored while submitting."""
        if self.is_loading:
            return False
        self.reset()
        self._navigator.navigate(Route.LIST)
        return True

    # -- submission -----------------------------------------------------

    def start_submit(self) -> asyncio.Future | None:
        """Begin a submission now and finish it in a task that ``close()`` can cancel.

        The form is validated and marked loading before this returns, so the
        submit and cancel controls are disabled from the first tap. Returns
        None when the submit control is disabled.
        """
        began = self._begin()
        if began is None:
            return None

        loop = asyncio.get_running_loop()
        if isinstance(began, SubmissionOutcome):
            future = loop.create_future()
            future.set_result(began)
            return future

        task = loop.create_task(self._run(began))
        # A task cancelled before its first step never reaches _run's cleanup
        task.add_done_callback(self._settle)
        self._inflight = task
        return task

    def close(self) -> None:
        """Detach the form; an in-flight submission is cancelled."""
        self._closed = True
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

    async def submit(self) -> SubmissionOutcome | None:
        """Validate and submit; returns None when the submit control is disabled."""
        began = self._begin()
        if not isinstance(began, ReservationRequest):
            return began
        return await self._run(began)

    def _begin(self) -> ReservationRequest | SubmissionOutcome | None:
        if not self.can_submit:
            logger.debug("Ignoring submit for spot %s: form busy or closed", self.spot_id)
            return None

        self._submitted_once = True
        request = self.validate()
        if request is None:
            return SubmissionOutcome(SubmissionStatus.INVALID_DATE, self.errors[DATE_FIELD])

        self.is_loading = True
        return request

    async def _run(self, request: ReservationRequest) -> SubmissionOutcome:
        try:
            outcome = await self._send(request)
        except asyncio.CancelledError:
            logger.info("Reservation request for spot %s cancelled", self.spot_id)
            raise
        finally:
            self.is_loading = False

        self._report(outcome)
        return outcome

    def _settle(self, task: asyncio.Task) -> None:
        self.is_loading = False

    async def _send(self, request: ReservationRequest) -> SubmissionOutcome:
        display = request.display_date(self._date_format)
        try:
            user_id = await get_stored_user(self._store, self._storage_key)
            if not user_id:
                logger.warning("No stored user; redirecting to login")
                return SubmissionOutcome(
                    SubmissionStatus.NOT_LOGGED_IN,
                    SUBMISSION_MESSAGES[SubmissionStatus.NOT_LOGGED_IN],
                    Route.LOGIN,
                )

            logger.info("Requesting reservation for spot %s on %s", request.spot_id, display)
            await request_booking(
                self._client,
                spot_id=request.spot_id,
                iso_date=request.iso_date,
                user_id=user_id,
            )
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Reservation request for spot %s rejected with status %s",
                request.spot_id,
                exc.response.status_code,
            )
            return outcome_for_status(exc.response.status_code)
        except Exception:
            logger.exception("Reservation request for spot %s failed", request.spot_id)
            return outcome_for_status(None)

        return SubmissionOutcome(SubmissionStatus.SUCCESS, f"Reservation requested for {display}", Route.LIST)

    def _report(self, outcome: SubmissionOutcome) -> None:
        if self._closed:
            return

        if outcome.ok:
            self._notifier.alert(SUCCESS_TITLE, outcome.message, on_acknowledge=self._acknowledge_success)
            return

        self._notifier.alert(ERROR_TITLE, outcome.message)
        if outcome.route is not None:
            self._navigator.navigate(outcome.route)

    def _acknowledge_success(self) -> None:
        if self._closed:
            return
        self.reset()
        self._navigator.navigate(Route.LIST)
