"""Colored console output shared by all rendering components."""

import threading

from colorama import init, Fore, Style

# Initialize colorama for cross-platform colored output
init(autoreset=True)

_lock = threading.Lock()
_debug_enabled = False


def set_debug(enabled: bool) -> None:
    """Enable or disable debug output."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug() -> bool:
    return _debug_enabled


def log_debug(message: str) -> None:
    """Log debug message with color (only if debug mode is enabled)."""
    if _debug_enabled:
        with _lock:
            print(f"{Fore.CYAN}[DEBUG]{Style.RESET_ALL} {message}")


def log_info(message: str) -> None:
    """Log info message with color."""
    with _lock:
        print(f"{Fore.GREEN}[INFO]{Style.RESET_ALL} {message}")


def log_warning(message: str) -> None:
    """Log warning message with color."""
    with _lock:
        print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {message}")


def log_error(message: str) -> None:
    """Log error message with color."""
    with _lock:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {message}")


def log_success(message: str) -> None:
    """Log success message with color."""
    with _lock:
        print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {message}")
