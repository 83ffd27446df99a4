"""Test fixtures for the spotbook form."""
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from datetime import datetime

import pytest
import pytest_asyncio
from fastapi import Body, FastAPI, Header, HTTPException, status
from httpx import ASGITransport, AsyncClient

from spotbook.app.flows.book import BookingForm
from spotbook.app.flows.navigation import Route

NOW = datetime(2026, 1, 31, 15, 30)


class MemoryStore:
    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values = dict(values or {})
        self.reads: list[str] = []

    async def get(self, key: str) -> str | None:
        self.reads.append(key)
        return self.values.get(key)


class RecordingNavigator:
    def __init__(self) -> None:
        self.routes: list[Route] = []

    def navigate(self, route: Route) -> None:
        self.routes.append(route)


class RecordingNotifier:
    def __init__(self) -> None:
        self.alerts: list[tuple[str, str]] = []
        self._pending = []

    def alert(self, title, message, on_acknowledge=None) -> None:
        self.alerts.append((title, message))
        self._pending.append(on_acknowledge)

    def acknowledge(self) -> None:
        callback = self._pending.pop()
        if callback is not None:
            callback()


class FakeBookingApi:
    """In-process stand-in for the remote booking API."""

    def __init__(self) -> None:
        self.status_code = status.HTTP_201_CREATED
        self.calls: list[dict] = []
        self.hold = False
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.app = self._build_app()

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.post("/bookings/{spot_id}/spots")
        async def create_booking(
            spot_id: str,
            payload: dict = Body(...),
            user_id: str | None = Header(default=None, convert_underscores=False),
        ):
            self.calls.append({"spot_id": spot_id, "payload": payload, "user_id": user_id})
            self.entered.set()
            if self.hold:
                await self.release.wait()
            if self.status_code >= 400:
                raise HTTPException(self.status_code, detail="rejected")
            return {"_id": "booking-1", "spot": spot_id, "date": payload.get("date"), "approved": None}

        return app


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def booking_api() -> FakeBookingApi:
    return FakeBookingApi()


@pytest_asyncio.fixture
async def api_client(booking_api: FakeBookingApi) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=booking_api.app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore({"user": "user-42"})


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_form(api_client, store, navigator, notifier, clock):
    def factory(**overrides) -> BookingForm:
        kwargs = {
            "client": api_client,
            "store": store,
            "navigator": navigator,
            "notifier": notifier,
            "clock": clock,
            "platform": "android",
        }
        kwargs.update(overrides)
        return BookingForm("spot-7", **kwargs)

    return factory
