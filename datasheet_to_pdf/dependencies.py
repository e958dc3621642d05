"""Checks for the external tools needed to render datasheets."""

import importlib
import shutil
from pathlib import Path

from colorama import Fore, Style


def chromium_executable() -> Path:
    """Path of the Chromium build Playwright would launch."""
    from playwright.sync_api import sync_playwright

    with sync_playwright() as playwright:
        return Path(playwright.chromium.executable_path)


def check_command(command: str, description: str) -> bool:
    """Check if a command is available on PATH."""
    if shutil.which(command):
        print(f"{Fore.GREEN}✓{Style.RESET_ALL} {description} is available")
        return True
    print(f"{Fore.YELLOW}✗{Style.RESET_ALL} {description} is not available")
    return False


def check_module(module: str, description: str) -> bool:
    """Check if a Python module can be imported."""
    try:
        importlib.import_module(module)
    except ImportError as e:
        print(f"{Fore.RED}✗{Style.RESET_ALL} {description} could not be imported: {e}")
        return False
    print(f"{Fore.GREEN}✓{Style.RESET_ALL} {description} is available")
    return True


def check_dependencies(check_optional: bool = True) -> bool:
    """Return True if everything required for rendering is installed."""
    # Page numbers are read back from the first pass with PyMuPDF
    ok = check_module("fitz", "PyMuPDF")

    try:
        executable = chromium_executable()
    except Exception as e:
        print(f"{Fore.RED}✗{Style.RESET_ALL} Playwright could not be started: {e}")
        executable = None

    if executable is None or not executable.exists():
        print(f"{Fore.RED}✗{Style.RESET_ALL} Playwright Chromium is not installed.")
        print("  Install it with: python -m playwright install chromium")
        ok = False

    if check_optional:
        # Without git the file modification time is used as datasheet date
        check_command("git", "Git")

    return ok
