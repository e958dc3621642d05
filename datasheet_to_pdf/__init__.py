"""Render Markdown hardware datasheets into paginated PDFs with a page-numbered table of contents."""

__version__ = "1.0.0"
