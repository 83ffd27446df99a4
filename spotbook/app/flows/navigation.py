from enum import Enum
from typing import Callable, Protocol


class Route(str, Enum):
    LOGIN = "Login"
    LIST = "List"


class Navigator(Protocol):
    def navigate(self, route: Route) -> None: ...


class Notifier(Protocol):
    def alert(
        self,
        title: str,
        message: str,
        on_acknowledge: Callable[[], None] | None = None,
    ) -> None: ...
