"""
Controller States

Exactly one of Loading, Ready or Error is current at any time.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Union

from themesync.common.theme import Theme


@dataclass(frozen=True)
class Loading:
    """A fetch is in flight"""
    status: ClassVar[str] = "loading"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status}


@dataclass(frozen=True)
class Ready:
    """A usable theme is available (fresh, cached or default)"""
    theme: Theme
    status: ClassVar[str] = "ready"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "theme": self.theme.to_dict()}


@dataclass(frozen=True)
class Error:
    """The fetch call itself failed; last_known_theme is still renderable"""
    message: str
    last_known_theme: Theme
    status: ClassVar[str] = "error"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "theme": self.last_known_theme.to_dict(),
        }


ControllerState = Union[Loading, Ready, Error]
