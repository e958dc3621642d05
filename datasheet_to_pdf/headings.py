"""Hierarchical section numbering for H2-H6 headings."""

import re
from typing import List, Sequence, Tuple

from .models import HeadingEntry

HEADING_TAGS = ["h2", "h3", "h4", "h5", "h6"]
MIN_LEVEL = 2
MAX_LEVEL = 6

Counters = Tuple[int, ...]

EMPTY_COUNTERS: Counters = (0,) * (MAX_LEVEL - MIN_LEVEL + 1)


def advance_counters(counters: Counters, level: int) -> Tuple[Counters, str]:
    """Visit a heading of ``level`` and return the updated counters and its prefix.

    The counter of the heading's own level is incremented, all deeper levels
    are reset to zero and the prefix joins the counters from H2 down to the
    heading's level, e.g. ``"2.1.3"`` for an H4.
    """
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Heading level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}")

    index = level - MIN_LEVEL
    updated = list(counters)
    updated[index] += 1
    for deeper in range(index + 1, len(updated)):
        updated[deeper] = 0

    prefix = ".".join(str(n) for n in updated[:index + 1])
    return tuple(updated), prefix


def heading_slug(text: str) -> str:
    """Anchor id for a heading: lower-cased, non-word runs replaced with '-'."""
    return re.sub(r"[^\w]+", "-", text.lower())


def heading_level(tag_name: str) -> int:
    return int(tag_name[1])


def number_headings(headings: Sequence) -> List[HeadingEntry]:
    """Prefix every heading element with its section number, in document order.

    ``headings`` are BeautifulSoup tags (h2-h6). Their text is replaced in place
    with the numbered text; the returned entries are not yet attached to a
    table of contents.
    """
    counters = EMPTY_COUNTERS
    entries = []

    for heading in headings:
        level = heading_level(heading.name)
        counters, prefix = advance_counters(counters, level)

        numbered_text = f"{prefix} {heading.get_text().strip()}"
        heading.string = numbered_text

        entries.append(HeadingEntry(text=numbered_text, level=level, anchor=heading_slug(numbered_text)))

    return entries
