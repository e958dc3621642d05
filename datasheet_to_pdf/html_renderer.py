"""HTML document of a single datasheet: numbering, table of contents and styling."""

from pathlib import Path
from typing import List, Optional

from bs4 import BeautifulSoup

from .console import log_debug, log_warning
from .datasheet import Datasheet
from .exceptions import ConfigurationError
from .headings import HEADING_TAGS, heading_slug, number_headings
from .models import HeadingEntry

HTML_SKELETON = '<!DOCTYPE html><html><head><meta charset="utf-8"/></head><body>{body}</body></html>'

CONTENTS_ANCHOR_ID = "contents"
TABLE_OF_CONTENTS_ID = "table-of-contents"
FEATURE_LIST_ID = "feature-list"

WEB_FONTS_URL = (
    "https://fonts.googleapis.com/css2?family=Open+Sans:ital,wght@0,400;0,700;1,400"
    "&family=Roboto+Mono:ital,wght@0,400;0,700;1,400&display=swap"
)


class HTMLRenderer:
    """Owns the HTML tree of one datasheet for the duration of its pipeline.

    The tree is mutated in place by the methods below and serialized with
    :meth:`write`. A renderer is never shared between datasheets.
    """

    def __init__(self, datasheet: Datasheet, stylesheets_path):
        self.datasheet = datasheet
        self.stylesheets_path = Path(stylesheets_path)
        self.soup = BeautifulSoup(HTML_SKELETON.format(body=datasheet.html), "html.parser")
        self._raw_css: Optional[str] = None

    @property
    def raw_css(self) -> str:
        """Common stylesheet followed by the stylesheet of the datasheet type."""
        if self._raw_css is None:
            self._raw_css = self._read_css_for_type(self.datasheet.type)
        return self._raw_css

    def get_stylesheets_for_type(self, datasheet_type) -> List[Path]:
        return [
            self.stylesheets_path / "common-style.css",
            self.stylesheets_path / f"{datasheet_type}-style.css",
        ]

    def _read_css_for_type(self, datasheet_type) -> str:
        css_content = ""
        for stylesheet in self.get_stylesheets_for_type(datasheet_type):
            if not stylesheet.exists():
                raise ConfigurationError(
                    f"No stylesheet for type '{datasheet_type}' found ({stylesheet}). "
                    "Make sure you're using one of the supported types."
                )
            css_content += stylesheet.read_text(encoding='utf-8') + "\n"
        return css_content

    def build(self, use_web_fonts: bool = False) -> None:
        """Apply captions, heading ids, feature list marker and stylesheet."""
        self.add_illustration_captions()
        self.inject_heading_ids()
        self.format_feature_list()
        self.add_css(self.raw_css)
        if use_web_fonts:
            self.inject_fonts()

    def add_css(self, raw_css: str) -> None:
        style = self.soup.new_tag("style")
        style.string = raw_css
        self.soup.head.append(style)

    def add_subtitle(self, subtitle: str, label: str, identifier: str) -> None:
        """Prepend a subtitle block: free text, then '<label>: <identifier>'."""
        subtitle_element = self.soup.new_tag("div", attrs={"class": "subtitle"})
        subtitle_element.append(subtitle)
        subtitle_element.append(self.soup.new_tag("br"))
        subtitle_element.append(f"{label}: {identifier}")
        self.soup.body.insert(0, subtitle_element)

    def enumerate_headings(self) -> List[HeadingEntry]:
        """Number all H2-H6 headings and build the table of contents.

        The table of contents is inserted right after the element with id
        "contents". Without that anchor the headings are still numbered but
        the table of contents is not part of the document.
        """
        table_of_contents = self.soup.new_tag("div", attrs={"id": TABLE_OF_CONTENTS_ID})
        content_title = self.soup.find(id=CONTENTS_ANCHOR_ID)
        if content_title is not None:
            content_title.insert_after(table_of_contents)
        else:
            log_warning(f"No '#{CONTENTS_ANCHOR_ID}' element in {self.datasheet.content_file_path}, table of contents omitted")

        entries = number_headings(self.soup.find_all(HEADING_TAGS))
        for entry in entries:
            entry.item = self._add_table_of_contents_item(table_of_contents, entry)

        log_debug(f"Enumerated {len(entries)} headings in {self.datasheet.content_file_path.name}")
        return entries

    def _add_table_of_contents_item(self, table_of_contents, entry: HeadingEntry):
        item = self.soup.new_tag("div", attrs={"class": f"list-h{entry.level}"})
        link = self.soup.new_tag("a", href=f"#{entry.anchor}")
        link.string = entry.text
        item.append(link)
        table_of_contents.append(item)
        return item

    def update_page_numbers_in_table_of_contents(self, entries: List[HeadingEntry]) -> None:
        """Append the page number to every table of contents row (empty when unresolved)."""
        for entry in entries:
            page_number_element = self.soup.new_tag("div", attrs={"class": "page-number"})
            page_number_element.string = str(entry.page_number) if entry.is_resolved else ""
            entry.item.append(page_number_element)

    def add_illustration_captions(self) -> None:
        """Add the alt text of every image as a 'img-description' div right after it."""
        for image in self.soup.find_all("img"):
            description = image.get("alt")
            if description:
                description_element = self.soup.new_tag("div", attrs={"class": "img-description"})
                description_element.string = description
                image.insert_after(description_element)

    def inject_heading_ids(self) -> None:
        """Give every heading an id so table of contents links can point at it."""
        for heading in self.soup.find_all(HEADING_TAGS):
            heading["id"] = heading_slug(heading.get_text())

    def format_feature_list(self) -> None:
        """Mark the first list of the document as the feature list (styled via #feature-list)."""
        outer_list = self.soup.body.find("ul")
        if outer_list is None:
            log_warning(f"No feature list found in {self.datasheet.content_file_path}")
            return
        outer_list["id"] = FEATURE_LIST_ID

    def inject_fonts(self) -> None:
        """Use web fonts instead of locally installed ones."""
        head = self.soup.head
        head.append(self.soup.new_tag("link", rel="preconnect", href="https://fonts.googleapis.com"))
        head.append(self.soup.new_tag("link", rel="preconnect", href="https://fonts.gstatic.com", crossorigin="crossorigin"))
        head.append(self.soup.new_tag("link", rel="stylesheet", href=WEB_FONTS_URL))

    def serialize(self) -> str:
        return str(self.soup)

    def write(self, target_path) -> None:
        """Write the current state of the document to ``target_path``."""
        with open(target_path, 'w', encoding='utf-8') as f:
            f.write(self.serialize())
