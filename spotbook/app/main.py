import argparse
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Callable

from spotbook.app.core import http_client as http_module
from spotbook.app.core.config import settings
from spotbook.app.core.http_client import close_api_client, init_api_client
from spotbook.app.core.redis_client import RedisStore, close_redis, init_redis
from spotbook.app.flows.book import BookingForm, SubmissionOutcome
from spotbook.app.flows.navigation import Route


@asynccontextmanager
async def lifespan():
    await init_redis()
    await init_api_client()
    try:
        yield
    finally:
        await close_api_client()
        await close_redis()


class ConsoleNotifier:
    """Prints alerts and acknowledges them straight away."""

    def alert(self, title: str, message: str, on_acknowledge: Callable[[], None] | None = None) -> None:
        print(f"{title}: {message}")
        if on_acknowledge is not None:
            on_acknowledge()


class ConsoleNavigator:
    def __init__(self) -> None:
        self.current: Route | None = None

    def navigate(self, route: Route) -> None:
        self.current = route
        print(f"-> {route.value}")


async def book_spot(spot_id: str, reservation_date: date | None = None) -> SubmissionOutcome | None:
    async with lifespan():
        form = BookingForm(
            spot_id,
            client=http_module.get_api_client(),
            store=RedisStore(),
            navigator=ConsoleNavigator(),
            notifier=ConsoleNotifier(),
        )
        if reservation_date is not None:
            form.on_date_change(reservation_date)
        print(f"Reservation date: {form.display_date}")

        outcome = await form.submit()
        if outcome is not None and form.errors:
            print(f"Error: {outcome.message}")
        return outcome


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="spotbook-book", description="Request a reservation for a spot.")
    parser.add_argument("spot_id")
    parser.add_argument("--date", type=date.fromisoformat, default=None, help="YYYY-MM-DD, defaults to today")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL)
    outcome = asyncio.run(book_spot(args.spot_id, args.date))
    return 0 if outcome is not None and outcome.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
