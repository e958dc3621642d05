"""Headless Chromium print engine (Playwright)."""

import html
from pathlib import Path
from typing import Any, Dict

from playwright.async_api import async_playwright

from .console import log_debug, log_error, log_info, log_warning
from .exceptions import ConfigurationError

BROWSER_TIMEOUT_MS = 120000
LAUNCH_TIMEOUT_MS = 60000
PDF_RENDER_RETRY_COUNT = 3

PDF_MARGINS = {
    'top': '36mm',
    'right': '20mm',
    'bottom': '28mm',
    'left': '20mm',
}

CHROMIUM_ARGS = [
    '--disable-setuid-sandbox',
    '--no-sandbox',
    '--disable-dev-shm-usage',  # Use /tmp instead of /dev/shm (prevents OOM crashes)
]


class PDFEngine:
    """Prints web pages to PDF with a shared Chromium instance.

    :meth:`begin` and :meth:`end` manage the shared browser; each
    :meth:`create_pdf_from_url` call works in its own tab. When the shared
    browser is not running, a call launches a private browser that only it
    uses and closes again, unless ``auto_start`` is disabled, in which case
    the call fails.
    """

    def __init__(self, assets_path, auto_start: bool = True):
        self.assets_path = Path(assets_path)
        self.auto_start = auto_start
        self._playwright = None
        self._browser = None

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def _launch(self):
        """Launch Chromium. Returns (playwright, browser)."""
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=True,
                timeout=LAUNCH_TIMEOUT_MS,
                args=CHROMIUM_ARGS,
            )
        except Exception:
            await playwright.stop()
            raise
        return playwright, browser

    @staticmethod
    async def _close(playwright, browser) -> None:
        try:
            if browser.is_connected():
                await browser.close()
        finally:
            await playwright.stop()

    async def begin(self) -> None:
        """Start the shared browser. Failing to launch is fatal and not retried."""
        if self.is_running:
            return
        log_info("Launching Chromium...")
        self._playwright, self._browser = await self._launch()

    async def end(self) -> None:
        """Stop the shared browser."""
        if not self.is_running:
            return
        # Null out first to prevent double-close
        playwright, browser = self._playwright, self._browser
        self._playwright = None
        self._browser = None
        await self._close(playwright, browser)
        log_debug("Browser instance closed and cleaned up")

    async def create_pdf_from_url(self, url: str, renderer, target_path) -> bool:
        """Load ``url`` and print it to ``target_path``.

        Returns True only if the PDF exists afterwards. Navigation and print
        failures only fail this call; the shared browser keeps running.
        """
        target_path = Path(target_path)

        if self.is_running:
            return await self._render(self._browser, url, renderer, target_path)

        if not self.auto_start:
            raise RuntimeError("PDF engine is not running, call begin() first")

        playwright, browser = await self._launch()
        try:
            return await self._render(browser, url, renderer, target_path)
        finally:
            await self._close(playwright, browser)

    async def _render(self, browser, url: str, renderer, target_path: Path) -> bool:
        page = await browser.new_page()
        try:
            page.set_default_navigation_timeout(BROWSER_TIMEOUT_MS)
            if not await self._navigate(page, url):
                return False
            options = self.build_pdf_options(renderer)
            printed = await self._print(page, target_path, options)
        finally:
            await page.close()

        return printed and target_path.exists()

    async def _navigate(self, page, url: str) -> bool:
        try:
            response = await page.goto(url, wait_until='networkidle')
        except Exception as e:
            log_error(f"Failed to navigate to {url}. {e}")
            return False

        if response is not None and response.status == 404:
            log_error(f"404 returned for {url}")
            return False
        return True

    async def _print(self, page, target_path: Path, options: Dict[str, Any]) -> bool:
        """Print the loaded page, retrying as Chromium sometimes fails for no apparent reason."""
        for attempt in range(1, PDF_RENDER_RETRY_COUNT + 1):
            try:
                await page.pdf(path=str(target_path), **options)
            except Exception as e:
                # A failed attempt may leave a corrupted file behind
                target_path.unlink(missing_ok=True)
                if attempt == PDF_RENDER_RETRY_COUNT:
                    log_error(f"Failed to create PDF {target_path} after {PDF_RENDER_RETRY_COUNT} attempts: {e}")
                    return False
                log_warning(f"Retrying to create PDF {target_path} due to error ({e})...")
                continue

            if attempt > 1:
                log_debug(f"PDF {target_path} created on attempt {attempt}")
            return True
        return False

    def _logo_svg(self, datasheet_type) -> str:
        logo_path = self.assets_path / f"{datasheet_type}-logo.svg"
        if not logo_path.exists():
            raise ConfigurationError(f"No logo for type '{datasheet_type}' found ({logo_path})")
        return logo_path.read_text(encoding='utf-8')

    def build_pdf_options(self, renderer) -> Dict[str, Any]:
        """Print options for a datasheet: A4, fixed margins, header and footer."""
        datasheet = renderer.datasheet
        title = html.escape(datasheet.title)
        variant = html.escape(datasheet.variant)
        revision = f" ({html.escape(datasheet.hardware_revision)})" if datasheet.hardware_revision else ""

        footer_template = f"""
        <div class="footer">
            <div class="pagination"><span class="pageNumber"></span> / <span class="totalPages"></span></div>
            <div class="product-name-footer">{title}<span class="product-variant"> {variant}</span>{revision}</div>
            <div class="modified-date">Modified: {datasheet.modified_date}</div>
        </div>
        """

        header_template = f"""
        <style>{renderer.raw_css}</style>
        <div class="header">
            <div class="logo-header">{self._logo_svg(datasheet.type)}</div>
            <div class="header-title">
                {title}<br />
                <span class="product-variant">{variant}</span>
            </div>
        </div>
        """

        return {
            'format': 'A4',
            'margin': dict(PDF_MARGINS),
            'display_header_footer': True,
            'print_background': True,
            'header_template': header_template,
            'footer_template': footer_template,
        }
