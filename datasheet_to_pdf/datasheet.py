"""Markdown datasheet sources with YAML front matter."""

import fnmatch
import os
import re
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import markdown
import yaml

from .config import Config
from .console import log_debug, log_error, log_info
from .exceptions import ConfigurationError, SourceDocumentError

LEGACY_DATASHEETS_FOLDER = "datasheet"

FRONT_MATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

# toc gives every heading an id, so a "# Contents" heading becomes the #contents anchor
MARKDOWN_EXTENSIONS = ["extra", "sane_lists", "toc"]


def split_front_matter(raw: str) -> Tuple[Dict[str, Any], str]:
    """Split a markdown file into its front matter mapping and the body.

    Files without front matter yield an empty mapping.
    """
    match = FRONT_MATTER_PATTERN.match(raw)
    if not match:
        return {}, raw

    metadata = yaml.safe_load(match.group(1))
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise ValueError(f"front matter must be a mapping, got {type(metadata).__name__}")
    return metadata, raw[match.end():]


def format_date(value: datetime) -> str:
    """Date format used in the datasheet footer (DD/MM/YYYY)."""
    return value.strftime("%d/%m/%Y")


def git_commit_date(path: Path) -> Optional[datetime]:
    """Date of the last commit touching ``path``, or None outside a git checkout."""
    try:
        result = subprocess.run(
            ["git", "log", "-1", "--format=%ct", "--", path.name],
            cwd=path.parent,
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError) as e:
        log_debug(f"git not available for {path}: {e}")
        return None

    timestamp = result.stdout.strip()
    if result.returncode != 0 or not timestamp:
        return None
    return datetime.fromtimestamp(int(timestamp))


def find_parent_dir(start: Path, name: str) -> Optional[Path]:
    """Nearest directory (``start`` or an ancestor) that contains an entry called ``name``."""
    for candidate in [start, *start.parents]:
        if (candidate / name).exists():
            return candidate
    return None


class Datasheet:
    """A markdown datasheet and everything derived from it.

    The file is read, its front matter parsed and its body converted to HTML
    when the object is created; a datasheet never changes afterwards.
    """

    def __init__(self, content_file_path, config: Optional[Config] = None):
        self.content_file_path = Path(content_file_path)
        self.config = config or Config()

        try:
            raw = self.content_file_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise SourceDocumentError(f"Cannot read datasheet {self.content_file_path}: {e}") from e

        try:
            self.metadata, self.markdown = split_front_matter(raw)
        except (yaml.YAMLError, ValueError) as e:
            raise SourceDocumentError(f"Cannot parse front matter of {self.content_file_path}: {e}") from e

        self.html = markdown.markdown(self.markdown, extensions=MARKDOWN_EXTENSIONS)
        self.modified_date = self._compute_modified_date()

    def __repr__(self) -> str:
        return f"Datasheet({str(self.content_file_path)!r})"

    def _compute_modified_date(self) -> str:
        commit_date = git_commit_date(self.content_file_path)
        if commit_date is not None:
            return format_date(commit_date)
        return format_date(datetime.fromtimestamp(self.content_file_path.stat().st_mtime))

    @property
    def identifier(self) -> Optional[str]:
        identifier = self.metadata.get("identifier")
        return str(identifier) if identifier is not None else None

    @property
    def title(self) -> str:
        return str(self.metadata.get("title") or self.content_file_path.stem)

    @property
    def type(self) -> Optional[str]:
        return self.metadata.get("type")

    @property
    def variant(self) -> str:
        return str(self.metadata.get("variant") or "")

    @property
    def hardware_revision(self) -> Optional[str]:
        revision = self.metadata.get("hardwareRevision")
        return str(revision) if revision else None

    @property
    def is_draft(self) -> bool:
        return bool(self.metadata.get("isDraft"))

    @property
    def is_previous_revision(self) -> bool:
        return bool(self.metadata.get("isPreviousRevision"))

    @property
    def normalized_hardware_revision(self) -> Optional[str]:
        """Hardware revision with the first space turned into '-' and the first '.' removed."""
        if not self.hardware_revision:
            return None
        return self.hardware_revision.replace(" ", "-", 1).replace(".", "", 1)

    def pdf_filename(self, suffix: str) -> str:
        """File name of the rendered PDF: <identifier>[-<revision>]<suffix>."""
        name = self.identifier or self.content_file_path.stem
        if self.hardware_revision:
            name = f"{name}-{self.normalized_hardware_revision.lower()}"
        return name + suffix

    def construct_target_build_path(self, target_path: str) -> Path:
        """Resolve where the PDF of this datasheet goes.

        ``target_path`` is relative to the datasheets folder found above the
        source file. Previous revisions are stored in their own subfolder.
        """
        source_dir = self.content_file_path.resolve().parent
        folder_name = self.config.get_datasheets_folder()
        parent = find_parent_dir(source_dir, folder_name)

        # Check for legacy folder name
        if parent is None:
            folder_name = LEGACY_DATASHEETS_FOLDER
            parent = find_parent_dir(source_dir, folder_name)

        if parent is None:
            raise ConfigurationError(
                f"No '{self.config.get_datasheets_folder()}' directory found above {source_dir}"
            )

        build_path = parent / folder_name / target_path
        if self.is_previous_revision:
            previous_folder = self.config.get_previous_documentation_folder()
            if not previous_folder:
                raise ConfigurationError(
                    f"{self.content_file_path} is a previous revision but no previousDocumentationFolder is configured"
                )
            build_path = build_path / previous_folder
        return build_path


def _is_excluded(path: Path, root: Path, exclude_patterns: List[str]) -> bool:
    parts = path.relative_to(root).parts
    for pattern in exclude_patterns:
        if any(fnmatch.fnmatch(part, pattern) for part in parts):
            return True
        if fnmatch.fnmatch(str(path), pattern):
            return True
    return False


def find_datasheet_files(source_path, file_pattern: str, exclude_patterns: Optional[List[str]] = None) -> List[Path]:
    """Recursively find datasheet files below ``source_path``."""
    root = Path(source_path)
    exclude_patterns = exclude_patterns or []

    if root.is_file():
        return [root]

    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        # Prune excluded directories
        dirnames[:] = [d for d in dirnames if not _is_excluded(current / d, root, exclude_patterns)]
        for filename in filenames:
            file_path = current / filename
            if fnmatch.fnmatch(filename, file_pattern) and not _is_excluded(file_path, root, exclude_patterns):
                found.append(file_path)
    return sorted(found)


def load_datasheets(file_paths: List[Path], config: Config) -> Tuple[List[Datasheet], int]:
    """Load datasheets, skipping drafts. Returns (datasheets, number of files that failed to load)."""
    datasheets = []
    failed = 0

    for path in file_paths:
        try:
            datasheet = Datasheet(path, config)
        except SourceDocumentError as e:
            log_error(str(e))
            failed += 1
            continue

        if datasheet.is_draft:
            log_info(f"Skipping datasheet draft {path}")
            continue
        datasheets.append(datasheet)

    return datasheets, failed
