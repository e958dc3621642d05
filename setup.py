#!/usr/bin/env python3
"""
Setup script for the datasheet to PDF converter.

After installing, fetch the browser used for printing with:
    python -m playwright install chromium
"""

from pathlib import Path

from setuptools import find_packages, setup


def read_requirements(filename: str) -> list:
    """Read requirement lines, ignoring comments and blank lines."""
    path = Path(__file__).parent / filename
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip() and not line.startswith("#")]


setup(
    name="datasheet-to-pdf",
    version="1.0.0",
    description="Render markdown hardware datasheets to PDF with a page-numbered table of contents",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=read_requirements("requirements.txt"),
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "datasheet-to-pdf=datasheet_to_pdf.converter:main",
        ],
    },
)
