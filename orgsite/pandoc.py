"""Document pipeline for orgsite.

This module wraps pandoc (through pypandoc) to parse lightweight markup into a
document tree and to render trees, or fragments of them, back to HTML. The
document tree is pandoc's AST loaded into panflute elements.

It also extracts the derived views the site needs from a parsed document:
flattened metadata, the first level-1 heading, a table of contents and the
first image.

Key functions:
- parse_text / parse_file: Markup text to a panflute Doc.
- render / render_blocks / render_inlines: Doc or fragments to HTML.
- extract_meta: Flatten the metadata block into plain Python values.
- get_h1, get_toc, get_first_img: Derived views over the document body.
"""

from __future__ import annotations

import io
import json
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import panflute as pf
import pypandoc

Doc = pf.Doc

# Extensions enabled for each reader. Pandoc rejects extensions a reader does
# not support, so each list only names what that reader accepts.
READER_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "org": (
        "auto_identifiers",
        "citations",
        "smart",
    ),
    "markdown": (
        "yaml_metadata_block",
        "fenced_code_blocks",
        "fenced_code_attributes",
        "auto_identifiers",
        "smart",
        "implicit_figures",
        "footnotes",
        "citations",
        "table_captions",
    ),
}

READER_SUFFIXES = {
    ".org": "org",
    ".md": "markdown",
    ".markdown": "markdown",
}

WRITER_FORMAT = "html5"
PLAIN_WRITER_ARGS = ("--wrap=none",)
TOC_DEPTH = 3

# Separator used by the site's org tags, e.g. "#+KEYWORDS: python; emacs".
META_LIST_SEPARATOR = "; "


class ParseError(Exception):
    """Error reported by pandoc while reading a source document.

    Attributes:
        source: Path or label of the text that failed to parse.
        message: Error message reported by pandoc.
    """

    def __init__(self, source: Path | str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"{source}: {message}")


class RenderError(Exception):
    """Pandoc failed to write a document tree.

    Any tree produced by parsing should be writable, so this signals a broken
    invariant rather than bad input.
    """


@dataclass(frozen=True)
class MetaFieldError:
    """Stands in for a metadata field whose value could not be rendered.

    Attributes:
        key: Top-level metadata key.
        message: Why rendering failed.
    """

    key: str
    message: str


def reader_format(reader: str) -> str:
    """Build the pandoc input format string for a reader name.

    Args:
        reader: Reader name, "org" or "markdown".

    Returns:
        Format string such as "org+auto_identifiers+citations+smart".

    Raises:
        ValueError: If the reader is not supported.
    """
    try:
        extensions = READER_EXTENSIONS[reader]
    except KeyError:
        raise ValueError(f"Unsupported reader: {reader!r}") from None
    return reader + "".join(f"+{ext}" for ext in extensions)


def reader_for_path(path: Path | str) -> str:
    """Pick the reader for a source file based on its suffix."""
    suffix = Path(path).suffix.lower()
    try:
        return READER_SUFFIXES[suffix]
    except KeyError:
        raise ValueError(f"No reader for {suffix or 'files without suffix'}") from None


def parse_text(text: str, reader: str = "org", source: Path | str = "<string>") -> Doc:
    """Parse markup text into a document tree.

    Args:
        text: Markup source.
        reader: Reader name (see READER_EXTENSIONS).
        source: Label used in error messages.

    Returns:
        The parsed panflute Doc.

    Raises:
        ParseError: If pandoc reports an error.
    """
    try:
        output = pypandoc.convert_text(text, "json", format=reader_format(reader))
    except (RuntimeError, OSError) as exc:
        raise ParseError(source, str(exc).strip()) from exc
    return pf.load(io.StringIO(output))


def parse_file(path: Path, reader: str | None = None) -> Doc:
    """Read a source file and parse it.

    Args:
        path: Path to the markup file.
        reader: Reader name; inferred from the file suffix when omitted.

    Returns:
        The parsed panflute Doc.
    """
    text = path.read_text(encoding="utf-8")
    return parse_text(text, reader or reader_for_path(path), source=path)


def _write(blocks: list[dict[str, Any]], to: str, extra_args: Sequence[str] = ()) -> str:
    payload = pf.Doc().to_json()
    payload["blocks"] = blocks
    try:
        return pypandoc.convert_text(
            json.dumps(payload), to, format="json", extra_args=list(extra_args)
        )
    except (RuntimeError, OSError) as exc:
        raise RenderError(str(exc).strip()) from exc


def render(doc: Doc) -> str:
    """Render a whole document body to an HTML fragment.

    Args:
        doc: Parsed document.

    Returns:
        HTML string.

    Raises:
        RenderError: If pandoc fails to write the tree.
    """
    return _write([block.to_json() for block in doc.content], WRITER_FORMAT)


def render_blocks(blocks: Iterable[pf.Block]) -> str:
    """Render a sequence of block elements to HTML."""
    return _write([block.to_json() for block in blocks], WRITER_FORMAT)


def render_inlines(inlines: Iterable[pf.Inline]) -> str:
    """Render inline elements as an HTML fragment without a wrapping paragraph."""
    plain = {"t": "Plain", "c": [inline.to_json() for inline in inlines]}
    return _write([plain], WRITER_FORMAT).strip()


def plain_text(elements: Sequence[pf.Element]) -> str:
    """Render inlines or blocks with pandoc's plain text writer.

    Args:
        elements: Either inline elements or block elements, not mixed.

    Returns:
        Plain text with surrounding whitespace stripped.
    """
    nodes = [elem.to_json() for elem in elements]
    if nodes and all(isinstance(elem, pf.Inline) for elem in elements):
        nodes = [{"t": "Plain", "c": nodes}]
    return _write(nodes, "plain", PLAIN_WRITER_ARGS).strip()


def _split_scalar(text: str) -> list[str]:
    if META_LIST_SEPARATOR in text:
        return text.split(META_LIST_SEPARATOR)
    return [text]


def _flatten(value: pf.MetaValue) -> Any:
    if isinstance(value, pf.MetaMap):
        return {key: _flatten(item) for key, item in value.content.items()}
    if isinstance(value, pf.MetaList):
        return [_flatten(item) for item in value.content]
    if isinstance(value, pf.MetaBool):
        return value.boolean
    if isinstance(value, pf.MetaString):
        return _split_scalar(value.text)
    if isinstance(value, (pf.MetaInlines, pf.MetaBlocks)):
        return _split_scalar(plain_text(list(value.content)))
    raise TypeError(f"Unexpected metadata value: {type(value).__name__}")


def extract_meta(doc: Doc) -> dict[str, Any] | None:
    """Flatten the document metadata into plain Python values.

    Maps and lists keep their structure and booleans pass through. Text
    values become lists of strings: a single element, or one element per
    "; "-separated part. Rich text is rendered to plain text first.

    A field whose rich text cannot be rendered holds a MetaFieldError; the
    remaining fields are still flattened.

    Args:
        doc: Parsed document.

    Returns:
        Dictionary of flattened fields, or None if the document has no metadata.
    """
    fields = doc.metadata.content
    if not fields:
        return None
    meta: dict[str, Any] = {}
    for key, value in fields.items():
        try:
            meta[key] = _flatten(value)
        except RenderError as exc:
            meta[key] = MetaFieldError(key, str(exc))
    return meta


def meta_errors(meta: dict[str, Any] | None) -> list[MetaFieldError]:
    """Return the fields of flattened metadata that failed to render."""
    if not meta:
        return []
    return [value for value in meta.values() if isinstance(value, MetaFieldError)]


def _descendants(elements: Iterable[Any]) -> Iterator[pf.Element]:
    """Yield elements and their children in document order.

    Element.walk reassigns every child list it visits, and documents are
    shared between Model snapshots, so the traversal reads the child
    attributes panflute lists in ``_children`` without touching them.
    """
    for elem in elements:
        if not isinstance(elem, pf.Element):
            continue
        yield elem
        for name in elem._children:
            child = getattr(elem, name, None)
            if isinstance(child, pf.Element):
                yield from _descendants([child])
            elif isinstance(child, Sequence):
                yield from _descendants(child)


def get_h1(doc: Doc) -> str | None:
    """Render the content of the first level-1 heading, if there is one."""
    for elem in _descendants(doc.content):
        if isinstance(elem, pf.Header) and elem.level == 1:
            return render_inlines(elem.content)
    return None


def get_first_img(doc: Doc) -> str | None:
    """Return the URL of the first image in the document body.

    Args:
        doc: Parsed document.

    Returns:
        The image URL as written in the source, or None.
    """
    for elem in _descendants(doc.content):
        if isinstance(elem, pf.Image):
            return elem.url
    return None


@dataclass
class _TocEntry:
    level: int
    identifier: str
    inlines: list[dict[str, Any]]


def _toc_inlines(inlines: Iterable[pf.Inline]) -> list[dict[str, Any]]:
    # Links are unwrapped and notes dropped so entries are plain link text.
    result: list[dict[str, Any]] = []
    for node in (inline.to_json() for inline in inlines):
        if node["t"] == "Link":
            result.extend(node["c"][1])
        elif node["t"] != "Note":
            result.append(node)
    return result


def _toc_item(entry: _TocEntry, children: list[_TocEntry]) -> list[dict[str, Any]]:
    if entry.identifier:
        attr = [f"toc-{entry.identifier}", [], []]
        target = [f"#{entry.identifier}", ""]
        text = [{"t": "Link", "c": [attr, entry.inlines, target]}]
    else:
        text = entry.inlines
    item: list[dict[str, Any]] = [{"t": "Plain", "c": text}]
    if children:
        item.append(_toc_list(children))
    return item


def _toc_list(entries: list[_TocEntry]) -> dict[str, Any]:
    grouped: list[tuple[_TocEntry, list[_TocEntry]]] = []
    for entry in entries:
        if grouped and entry.level > grouped[-1][0].level:
            grouped[-1][1].append(entry)
        else:
            grouped.append((entry, []))
    return {"t": "BulletList", "c": [_toc_item(e, kids) for e, kids in grouped]}


def get_toc(doc: Doc, depth: int = TOC_DEPTH) -> str:
    """Build an HTML table of contents from the document's headings.

    Top-level headings up to ``depth`` become a nested list of links to their
    anchors, rendered with the same writer settings as ``render``.

    Args:
        doc: Parsed document.
        depth: Deepest heading level to include.

    Returns:
        HTML fragment, empty when the document has no headings.
    """
    entries = [
        _TocEntry(block.level, block.identifier, _toc_inlines(block.content))
        for block in doc.content
        if isinstance(block, pf.Header)
        and block.level <= depth
        and "unlisted" not in block.classes
    ]
    if not entries:
        return ""
    return _write([_toc_list(entries)], WRITER_FORMAT)
