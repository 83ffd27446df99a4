import logging

import httpx


logger = logging.getLogger(__name__)


def booking_path(spot_id: str) -> str:
    return f"/bookings/{spot_id}/spots"


async def request_booking(
    client: httpx.AsyncClient,
    *,
    spot_id: str,
    iso_date: str,
    user_id: str,
) -> dict:
    """POST a reservation request for ``spot_id`` on ``iso_date`` (YYYY-MM-DD).

    Returns the decoded response body.

    Raises httpx.HTTPStatusError on non-2xx responses and httpx.HTTPError when
    no response arrives.
    """
    response = await client.post(
        booking_path(spot_id),
        json={"date": iso_date},
        headers={"user_id": user_id},
    )
    response.raise_for_status()

    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        logger.debug("Booking API returned a non-JSON body for spot %s", spot_id)
        return {}
