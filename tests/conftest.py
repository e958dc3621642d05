"""Shared fixtures for the datasheet rendering tests.

Chromium is never launched here: the PDF engine is driven with fake
browser objects and PDFs for page-number tests are written with PyMuPDF.
"""

from __future__ import annotations

import json
from pathlib import Path

import fitz
import pytest

from datasheet_to_pdf.config import Config

BOARD_DATASHEET = """---
identifier: ABX00001
title: Test Board
type: board
variant: WiFi
hardwareRevision: Rev 1.2
---
# Test Board

<div id="contents"></div>

## Features

- WiFi
- Bluetooth
    - BLE 5.0

## Hardware

### Sensors

![Board top view](top.png)

### Power

## Mechanical
"""


def write_pdf(path: Path, pages: list[list[str]]) -> Path:
    """Write a PDF with one text line per entry, one list per page."""
    document = fitz.open()
    for lines in pages:
        page = document.new_page()
        y = 72
        for line in lines:
            page.insert_text((72, y), line, fontsize=11)
            y += 24
    document.save(str(path))
    document.close()
    return path


@pytest.fixture
def stylesheets(tmp_path: Path) -> Path:
    """Stylesheet and logo directory supporting the 'board' type."""
    styles = tmp_path / "styles"
    styles.mkdir()
    (styles / "common-style.css").write_text("body { margin: 0; }", encoding="utf-8")
    (styles / "board-style.css").write_text("h2 { color: teal; }", encoding="utf-8")
    (styles / "board-logo.svg").write_text('<svg id="board-logo"></svg>', encoding="utf-8")
    return styles


@pytest.fixture
def datasheets_root(tmp_path: Path) -> Path:
    root = tmp_path / "project" / "datasheets"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def config_file(tmp_path: Path, stylesheets: Path, datasheets_root: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "defaultSourcePath": str(datasheets_root),
        "relativeBuildPath": "out",
        "stylesheetsPath": str(stylesheets),
        "subtitle": "Product Reference Manual",
        "identifierPrefix": "SKU",
        "datasheetSuffix": "-datasheet.pdf",
        "datasheetsFolder": "datasheets",
        "previousDocumentationFolder": "archive",
    }), encoding="utf-8")
    return path


@pytest.fixture
def config(config_file: Path) -> Config:
    return Config(config_file=str(config_file))


@pytest.fixture
def make_datasheet(datasheets_root: Path):
    """Write a datasheet markdown file below the datasheets folder."""

    def _make(name: str = "board", content: str = BOARD_DATASHEET, filename: str = "datasheet.md") -> Path:
        folder = datasheets_root / name
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / filename
        path.write_text(content, encoding="utf-8")
        return path

    return _make
