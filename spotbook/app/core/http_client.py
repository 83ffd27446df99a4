import httpx

from spotbook.app.core.config import settings


api_client: httpx.AsyncClient | None = None


def create_api_client(**kwargs) -> httpx.AsyncClient:
    """Build an AsyncClient pointed at the booking API."""
    kwargs.setdefault("base_url", settings.API_BASE_URL)
    kwargs.setdefault("timeout", settings.REQUEST_TIMEOUT_SECONDS)
    return httpx.AsyncClient(**kwargs)


async def init_api_client() -> None:
    """Initialise the shared booking API client."""
    global api_client
    api_client = create_api_client()


async def close_api_client() -> None:
    """Close the booking API client if it was initialised."""
    global api_client
    if api_client is not None:
        await api_client.aclose()
        api_client = None


def get_api_client() -> httpx.AsyncClient:
    if api_client is None:
        raise RuntimeError("Booking API client unavailable; call init_api_client() first")
    return api_client
