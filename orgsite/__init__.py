"""orgsite static site generator.

This package maps a content tree of org-mode posts and static assets to the
routes of a personal site. Documents are parsed with pandoc into a document
tree, kept in an in-memory model, and routed to output files.

Modules:
- pandoc: Parsing, rendering and extraction over document trees.
- model: The in-memory content model.
- routes: Encoding, decoding and enumeration of site routes.
- content: Loading sources from the content directory.
- feeds, generate: Writing the feed and the routes to disk.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
