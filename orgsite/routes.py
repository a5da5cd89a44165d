"""Site routes for orgsite.

A route is either a static passthrough path or a site route. Site routes are
the HTML pages (index, blog posts, tags, CV) and the feed. The RouteResolver
converts between routes and output file paths and lists every route the site
generates for a given model.

Key classes:
- StaticPath: A file or directory copied as is.
- HtmlRoute / FeedRoute: Generated site routes.
- RouteResolver: Encodes, decodes and enumerates routes.
"""

from __future__ import annotations

import posixpath
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from .model import Model


class RouteDecodeError(ValueError):
    """A requested path does not correspond to any route.

    Attributes:
        path: The path that failed to decode.
    """

    def __init__(self, path: str, message: str = "not a known route"):
        self.path = path
        super().__init__(f"{path!r}: {message}")


class MissingDocumentError(LookupError):
    """A blog post route was encoded without a document in the model.

    Attributes:
        post_id: The id that has no document.
    """

    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__(f"No document for blog post {post_id!r}")


@dataclass(frozen=True)
class StaticPath:
    """Path of a static file or directory, served without transformation."""

    path: str


@dataclass(frozen=True)
class IndexRoute:
    pass


@dataclass(frozen=True)
class BlogPostRoute:
    """A single post, identified by its source path relative to the content root."""

    post_id: str


@dataclass(frozen=True)
class TagsRoute:
    pass


@dataclass(frozen=True)
class CVRoute:
    pass


PageRoute = Union[IndexRoute, BlogPostRoute, TagsRoute, CVRoute]


@dataclass(frozen=True)
class HtmlRoute:
    """An HTML page of the site."""

    page: PageRoute


@dataclass(frozen=True)
class FeedRoute:
    """The syndication feed."""


SiteRoute = Union[HtmlRoute, FeedRoute]
Route = Union[StaticPath, SiteRoute]

INDEX_PATH = "index.html"
TAGS_PATH = "tags.html"
CV_PATH = "cv.html"
FEED_PATH = "feed.xml"
HTML_SUFFIX = ".html"


class RouteResolver:
    """Maps routes to output paths and back.

    Attributes:
        content_root: Directory static paths are served from.
        source_ext: Extension of post source files, e.g. ".org".
        static_dirs: Top-level directories passed through unchanged.
    """

    def __init__(
        self,
        content_root: str = "content",
        source_ext: str = ".org",
        static_dirs: Sequence[str] = ("assets", "images"),
    ):
        self.content_root = content_root
        self.source_ext = source_ext
        self.static_dirs = tuple(static_dirs)

    def encode(self, route: Route, model: Model) -> str:
        """Return the output file path for a route.

        Args:
            route: Route to encode.
            model: Model that must contain any blog post being encoded.

        Returns:
            Path relative to the output directory.

        Raises:
            MissingDocumentError: If a blog post has no document in the model.
        """
        if isinstance(route, StaticPath):
            return route.path
        if isinstance(route, FeedRoute):
            return FEED_PATH
        if not isinstance(route, HtmlRoute):
            raise TypeError(f"Not a route: {route!r}")
        page = route.page
        if isinstance(page, IndexRoute):
            return INDEX_PATH
        if isinstance(page, BlogPostRoute):
            if model.lookup(page.post_id) is None:
                raise MissingDocumentError(page.post_id)
            return posixpath.splitext(page.post_id)[0] + HTML_SUFFIX
        if isinstance(page, TagsRoute):
            return TAGS_PATH
        if isinstance(page, CVRoute):
            return CV_PATH
        raise TypeError(f"Not a page route: {page!r}")

    def decode(self, path: str, model: Model) -> Route:
        """Return the route served at ``path``.

        The model is not consulted; a decoded blog post may have no document.

        Args:
            path: Requested path relative to the site root.
            model: Current model (unused).

        Returns:
            The matching route.

        Raises:
            RouteDecodeError: If the path is not a static path, a fixed page
                or an ``.html`` post path.
        """
        if path.startswith(tuple(f"{name}/" for name in self.static_dirs)):
            return StaticPath(posixpath.join(self.content_root, path))
        if path == TAGS_PATH:
            return HtmlRoute(TagsRoute())
        if path == CV_PATH:
            return HtmlRoute(CVRoute())
        if path == FEED_PATH:
            return FeedRoute()
        if not path or path == INDEX_PATH:
            return HtmlRoute(IndexRoute())
        if not path.endswith(HTML_SUFFIX):
            raise RouteDecodeError(path, f"expected a {HTML_SUFFIX} path")
        base = path[: -len(HTML_SUFFIX)]
        return HtmlRoute(BlogPostRoute(base + self.source_ext))

    def all_routes(self, model: Model) -> list[Route]:
        """List every route to generate: static roots, fixed pages, then posts."""
        static: list[Route] = [
            StaticPath(posixpath.join(self.content_root, name))
            for name in self.static_dirs
        ]
        pages: list[PageRoute] = [IndexRoute(), CVRoute(), TagsRoute()]
        pages.extend(BlogPostRoute(post_id) for post_id in model.keys())
        return static + [HtmlRoute(page) for page in pages]


default_resolver = RouteResolver()


def encode_route(route: Route, model: Model) -> str:
    return default_resolver.encode(route, model)


def decode_route(path: str, model: Model) -> Route:
    return default_resolver.decode(path, model)


def all_routes(model: Model) -> list[Route]:
    return default_resolver.all_routes(model)
