"""Recover table of contents page numbers from a rendered PDF.

The print engine only reveals page boundaries after rendering, so the PDF is
rendered once without page numbers, its text is read back page by page and
every heading is looked up in that text.
"""

import asyncio
import re
from pathlib import Path
from typing import List, Tuple

import fitz

from .console import log_debug, log_warning
from .models import HeadingEntry

# (page index, text runs on that page)
PageTexts = List[Tuple[int, List[str]]]

_WHITESPACE_RUNS = re.compile(r"[\t\n]+")


def normalize_text(text: str) -> str:
    """Collapse tab and newline runs into single spaces."""
    return _WHITESPACE_RUNS.sub(" ", text).strip()


def extract_page_texts(pdf_path) -> PageTexts:
    """Read the text lines of every page of a PDF, sorted by page index."""
    pages = []
    with fitz.open(str(pdf_path)) as document:
        for page in document:
            runs = []
            for block in page.get_text("dict")["blocks"]:
                # Image blocks have no lines
                for line in block.get("lines", []):
                    text = "".join(span["text"] for span in line["spans"])
                    if text.strip():
                        runs.append(text)
            pages.append((page.number, runs))
    return sorted(pages, key=lambda page: page[0])


def match_page_numbers(entries: List[HeadingEntry], pages: PageTexts) -> List[HeadingEntry]:
    """Assign page numbers to the entries by searching the page texts.

    Pages are scanned from last to first and headings in reverse document
    order, so a heading's real occurrence is found before its echo in the
    table of contents near the front of the document. Entries that already
    have a page number are never touched.
    """
    remaining = [entry.text for entry in reversed(entries) if not entry.is_resolved]

    for page_index, runs in sorted(pages, key=lambda page: page[0], reverse=True):
        normalized_runs = [normalize_text(run) for run in runs]

        for heading in list(remaining):
            if heading not in normalized_runs:
                continue

            entry = next((e for e in entries if e.text == heading and not e.is_resolved), None)
            if entry is None:
                continue

            entry.resolve(page_index + 1)
            remaining = [text for text in remaining if text != heading]
            log_debug(f"'{heading}' is on page {entry.page_number} of {len(pages)}")

    for heading in remaining:
        log_warning(f"Heading '{heading}' was not found in document!")
    return entries


async def reverse_engineer_page_numbers(entries: List[HeadingEntry], pdf_path) -> List[HeadingEntry]:
    """Resolve page numbers of ``entries`` from the PDF at ``pdf_path``."""
    if not entries:
        log_warning("Content list doesn't contain any entries.")
        return entries

    pages = await asyncio.to_thread(extract_page_texts, Path(pdf_path))
    return match_page_numbers(entries, pages)
