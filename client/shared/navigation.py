"""
Navigation collaborator.

The session core never renders anything; it only tells the host where the
user should go next. Hosts plug in their own router by implementing
INavigator. Navigator is the in-memory implementation used by headless
hosts and by the test suite.
"""

import logging
from typing import Callable, Mapping, Optional, Protocol, runtime_checkable
from urllib.parse import urlencode

logger = logging.getLogger(__name__)


@runtime_checkable
class INavigator(Protocol):
    """Interface for redirecting the user."""

    def push(self, url: str) -> None:
        """
        Navigate to an in-app route.

        Args:
            url: Path plus optional query string (e.g. "/profile?tab=characters")
        """
        ...

    def redirect_external(self, url: str) -> None:
        """
        Hand the browser to a full URL (provider consent screens).

        Args:
            url: Absolute URL
        """
        ...


def build_url(path: str, params: Optional[Mapping[str, str]] = None) -> str:
    """Append query parameters to a route, preserving their order."""
    if not params:
        return path
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{urlencode(params)}"


class Navigator:
    """
    In-memory navigator that records every redirect.

    An optional listener is called after each navigation so a host can
    forward it to a real router.
    """

    def __init__(self, on_navigate: Optional[Callable[[str], None]] = None):
        self._history: list[str] = []
        self._on_navigate = on_navigate

    @property
    def history(self) -> list[str]:
        """All URLs navigated to, oldest first."""
        return list(self._history)

    @property
    def current(self) -> Optional[str]:
        """The most recent URL, or None before any navigation."""
        return self._history[-1] if self._history else None

    def push(self, url: str) -> None:
        logger.debug(f"Navigating to {url}")
        self._history.append(url)
        if self._on_navigate:
            self._on_navigate(url)

    def redirect_external(self, url: str) -> None:
        logger.debug(f"Redirecting browser to {url}")
        self._history.append(url)
        if self._on_navigate:
            self._on_navigate(url)
