"""Protocol definitions for orgsite.

Page layout is supplied by the caller. Generation only needs something that
turns an HTML route into a finished page, described by PageRenderer.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .model import Model
    from .routes import HtmlRoute


@runtime_checkable
class PageRenderer(Protocol):
    """Protocol for wrapping route content into a complete HTML page."""

    @abstractmethod
    def render_page(
        self, route: HtmlRoute, body: str | None, model: Model, toc: str | None
    ) -> str | None:
        """Render the page for an HTML route.

        Args:
            route: The route being generated.
            body: Rendered post HTML for blog posts, None for other pages.
            model: Model the route was enumerated from.
            toc: Table of contents HTML for blog posts, None for other pages.

        Returns:
            Complete page HTML, or None to skip the route.
        """
        ...
