"""Route generation for orgsite.

This module writes every enumerated route of a model to an output directory:
static directories are copied, blog posts are rendered through the document
pipeline, the fixed pages are delegated to a PageRenderer and the feed is
written by AtomFeedGenerator.

Key functions:
- generate_site: Materialize all routes of a model.
- route_output: Produce the content of a single HTML route.
- build_site: Load a project and generate it.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import load_config, resolver_from_config
from .content import load_model
from .feeds import AtomFeedGenerator
from .model import Model
from .pandoc import TOC_DEPTH, RenderError, get_toc, render
from .protocols import PageRenderer
from .routes import (
    BlogPostRoute,
    FeedRoute,
    HtmlRoute,
    MissingDocumentError,
    Route,
    RouteResolver,
    StaticPath,
)

logger = logging.getLogger(__name__)


class GenerateError(Exception):
    """Error while generating a route.

    Attributes:
        route: The route that could not be generated.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(self, route: Route, message: str, original_error: Exception | None = None):
        self.route = route
        self.message = message
        self.original_error = original_error
        super().__init__(f"{route}: {message}")


@dataclass
class GenerateResult:
    """Result of a generation run.

    Attributes:
        output_dir: Directory the site was written to.
        written: Output paths written, relative to output_dir.
        skipped: Routes that produced no output.
    """

    output_dir: Path
    written: list[str] = field(default_factory=list)
    skipped: list[Route] = field(default_factory=list)


def route_output(
    route: HtmlRoute,
    model: Model,
    page_renderer: PageRenderer | None = None,
    toc_depth: int = TOC_DEPTH,
) -> str | None:
    """Produce the HTML for a single page route.

    Blog posts are rendered from their document; without a page renderer the
    bare fragment is used. Other pages exist only through the page renderer.
    The renderer also receives the post's table of contents.

    Args:
        route: Page route to produce.
        model: Model holding the posts.
        page_renderer: Optional layout provider.
        toc_depth: Deepest heading level in the table of contents.

    Returns:
        Page HTML, or None if the route has no output.

    Raises:
        MissingDocumentError: If a blog post is not in the model.
        RenderError: If pandoc fails to write the post.
    """
    body = None
    toc = None
    if isinstance(route.page, BlogPostRoute):
        doc = model.lookup(route.page.post_id)
        if doc is None:
            raise MissingDocumentError(route.page.post_id)
        body = render(doc)
        if page_renderer is not None:
            toc = get_toc(doc, toc_depth)
    if page_renderer is None:
        return body
    return page_renderer.render_page(route, body, model, toc)


def _copy_static(
    project_root: Path, output_dir: Path, resolver: RouteResolver, path: str
) -> str | None:
    source = project_root / path
    if not source.exists():
        logger.info("Static path %s does not exist; skipping", path)
        return None
    relative = Path(path).relative_to(resolver.content_root)
    target = output_dir / relative
    if source.is_dir():
        shutil.copytree(source, target, dirs_exist_ok=True)
    else:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
    return relative.as_posix()


def generate_site(
    project_root: Path,
    config: dict[str, Any],
    model: Model,
    output_dir: Path | None = None,
    page_renderer: PageRenderer | None = None,
) -> GenerateResult:
    """Write every route of ``model`` to the output directory.

    Args:
        project_root: Root directory of the project; static paths are relative to it.
        config: Site configuration (see orgsite.config).
        model: Model to generate.
        output_dir: Destination; defaults to the configured output_dir.
        page_renderer: Optional layout provider for HTML routes.

    Returns:
        GenerateResult listing written paths and skipped routes.

    Raises:
        GenerateError: If a route cannot be encoded or rendered.
    """
    resolver = resolver_from_config(config)
    output_dir = output_dir or project_root / config.get("output_dir", "output")
    output_dir.mkdir(parents=True, exist_ok=True)
    toc_depth = int(config.get("toc_depth", TOC_DEPTH))
    result = GenerateResult(output_dir=output_dir)

    for route in resolver.all_routes(model):
        if isinstance(route, StaticPath):
            copied = _copy_static(project_root, output_dir, resolver, route.path)
            if copied is None:
                result.skipped.append(route)
            else:
                result.written.append(copied)
            continue
        try:
            target = resolver.encode(route, model)
            html = route_output(route, model, page_renderer, toc_depth)
        except (MissingDocumentError, RenderError) as exc:
            raise GenerateError(route, str(exc), exc) from exc
        if html is None:
            logger.debug("No output for %s", route)
            result.skipped.append(route)
            continue
        path = output_dir / target
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
        result.written.append(target)

    feed = AtomFeedGenerator(resolver)
    try:
        written = feed.write(output_dir, model, config)
    except RenderError as exc:
        raise GenerateError(FeedRoute(), str(exc), exc) from exc
    if written:
        result.written.append(feed.filename(model))
    logger.info("Wrote %d files to %s", len(result.written), output_dir)
    return result


def build_site(
    project_root: Path,
    page_renderer: PageRenderer | None = None,
    output_dir: Path | None = None,
) -> GenerateResult:
    """Load the project's content and generate the whole site.

    Args:
        project_root: Root directory of the project (holds orgsite.yaml).
        page_renderer: Optional layout provider for HTML routes.
        output_dir: Destination overriding the configured output_dir.

    Returns:
        GenerateResult for the run.
    """
    config = load_config(project_root)
    model = load_model(
        project_root / config["content_dir"],
        reader=config["reader"],
        source_ext=config["source_ext"],
        static_dirs=config["static_dirs"],
    )
    return generate_site(project_root, config, model, output_dir, page_renderer)
