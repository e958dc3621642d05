#!/usr/bin/env python3
"""
Datasheet to PDF converter.

Renders markdown datasheets with headless Chromium (Playwright) in two passes:
the first pass reveals on which page every heading ends up, the second one
embeds those page numbers in the table of contents.
"""

import argparse
import asyncio
import secrets
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .config import Config
from .console import log_error, log_info, log_success, log_warning, set_debug
from .datasheet import Datasheet, find_datasheet_files, load_datasheets
from .dependencies import check_dependencies
from .exceptions import ConfigurationError, RenderError
from .html_renderer import HTMLRenderer
from .models import RenderOutcome
from .page_numbers import reverse_engineer_page_numbers
from .pdf_engine import PDFEngine
from .resource_server import WebResourceProvider

HTML_FILENAME_SUFFIX = "-datasheet.html"


class DatasheetConverter:
    """Renders a batch of datasheets concurrently against one shared browser."""

    def __init__(self, config: Config, pdf_engine: Optional[PDFEngine] = None,
                 resource_provider: Optional[WebResourceProvider] = None):
        self.config = config
        self.pdf_engine = pdf_engine or PDFEngine(config.get_assets_path())
        self.resource_provider = resource_provider or WebResourceProvider(port=config.get_server_port())

    async def generate_pdfs(self, datasheets: List[Datasheet], target_path: Optional[str] = None) -> List[RenderOutcome]:
        """Generate PDF files for all datasheets.

        A datasheet that fails is logged and left out of the result; the
        others are not affected. Only a browser that can't be launched
        aborts the whole batch.
        """
        target_build_path = target_path or self.config.get_build_path()
        if not datasheets:
            log_warning("No datasheets to render.")
            return []

        # The mount table must be complete before the server starts
        for datasheet in datasheets:
            self.resource_provider.add_resource(datasheet)

        await self.resource_provider.begin()
        try:
            await self.pdf_engine.begin()
            try:
                with tqdm(total=len(datasheets), desc="Rendering datasheets", unit="datasheet") as pbar:
                    results = await asyncio.gather(*(
                        self._generate_isolated(datasheet, target_build_path, pbar)
                        for datasheet in datasheets
                    ))
            finally:
                await self.pdf_engine.end()
        finally:
            await self.resource_provider.end()

        rendered = [result for result in results if result is not None]
        log_info(f"Rendering complete: {len(rendered)}/{len(datasheets)} datasheets generated")
        return rendered

    async def _generate_isolated(self, datasheet: Datasheet, target_path: str, pbar) -> Optional[RenderOutcome]:
        log_info(f"Generating datasheet for {datasheet.content_file_path} ...")
        try:
            return await self.generate_pdf(datasheet, target_path)
        except Exception as e:
            log_error(f"Error generating {datasheet.content_file_path}: {e}")
            return None
        finally:
            pbar.update(1)

    async def generate_pdf(self, datasheet: Datasheet, target_path: str) -> RenderOutcome:
        """Run the full pipeline for one datasheet and return the rendered PDF."""
        build_path = datasheet.construct_target_build_path(target_path)
        log_info(f"Rendering into build path {build_path}")
        build_path.mkdir(parents=True, exist_ok=True)

        renderer = HTMLRenderer(datasheet, self.config.get_stylesheets_path())
        entries = renderer.enumerate_headings()
        if datasheet.identifier:
            renderer.add_subtitle(self.config.get_subtitle(), self.config.get_identifier_prefix(), datasheet.identifier)
        renderer.build(use_web_fonts=self.config.use_web_fonts())

        # Written next to the source so relative images and CSS resolve through the resource server
        html_filename = secrets.token_hex(4) + HTML_FILENAME_SUFFIX
        html_path = datasheet.content_file_path.resolve().parent / html_filename
        pdf_path = (build_path / datasheet.pdf_filename(self.config.get_datasheet_suffix())).resolve()
        html_url = self.resource_provider.resource_url(datasheet, html_filename)

        try:
            self._write_html(renderer, html_path)

            # Pass 1: find out where the headings end up
            if not await self.pdf_engine.create_pdf_from_url(html_url, renderer, pdf_path):
                raise RenderError(f"Couldn't render {datasheet.content_file_path} to {pdf_path}")

            try:
                entries = await reverse_engineer_page_numbers(entries, pdf_path)
                renderer.update_page_numbers_in_table_of_contents(entries)
                self._write_html(renderer, html_path)

                # Pass 2: final document with page numbers
                if not await self.pdf_engine.create_pdf_from_url(html_url, renderer, pdf_path):
                    raise RenderError(f"Couldn't render final version of {datasheet.content_file_path} to {pdf_path}")
            except Exception:
                # What is left over is the first pass without page numbers
                pdf_path.unlink(missing_ok=True)
                raise
        finally:
            html_path.unlink(missing_ok=True)

        if not pdf_path.exists():
            raise RenderError(f"Datasheet couldn't be created at: {pdf_path}")

        log_success(f"Datasheet saved at: {pdf_path}")
        return RenderOutcome(datasheet=datasheet, pdf_path=pdf_path)

    @staticmethod
    def _write_html(renderer: HTMLRenderer, html_path: Path) -> None:
        try:
            renderer.write(html_path)
        except OSError as e:
            raise RenderError(f"Couldn't write HTML file {html_path}. {e}") from e


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(description="Convert markdown datasheets to PDF with a page-numbered table of contents")
    parser.add_argument("source", nargs="?", default=None, help="Datasheet file or directory (default: defaultSourcePath from config)")
    parser.add_argument("--config", default=None, help="Config file (default: ./config.json)")
    parser.add_argument("--build-path", default=None, help="Output path relative to the datasheets folder (default: relativeBuildPath from config)")
    parser.add_argument("--stylesheets", default=None, help="Directory with common-style.css and <type>-style.css files")
    parser.add_argument("--assets", default=None, help="Directory with <type>-logo.svg files (default: stylesheets directory)")
    parser.add_argument("--port", type=int, default=None, help="Port of the local resource server (default: 8123)")
    parser.add_argument("--skip-checks", action="store_true", help="Don't check for Playwright's Chromium before rendering")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging for detailed output")

    args = parser.parse_args(argv)
    set_debug(args.debug)

    cli_config = {
        "source_dir": args.source,
        "build_path": args.build_path,
        "stylesheets_path": args.stylesheets,
        "assets_path": args.assets,
        "server_port": args.port,
    }
    try:
        config = Config(cli_config, config_file=args.config)
    except ConfigurationError as e:
        log_error(str(e))
        return 1

    if not args.skip_checks and not check_dependencies(check_optional=args.debug):
        return 1

    source_dir = config.get_source_dir()
    datasheet_files = find_datasheet_files(source_dir, config.get_datasheet_file_pattern(), config.get_exclude_patterns())
    if not datasheet_files:
        log_warning(f"No datasheet files found in {Path(source_dir).absolute()}")
        return 0

    datasheets, failed_to_load = load_datasheets(datasheet_files, config)
    converter = DatasheetConverter(config)
    try:
        rendered = asyncio.run(converter.generate_pdfs(datasheets))
    except Exception as e:
        log_error(f"Rendering aborted: {e}")
        return 1

    generated = len(rendered)
    failed = len(datasheets) - generated + failed_to_load

    if generated > 0:
        print(f"✅ {generated} Datasheets generated.")
    if failed > 0:
        print(f"❌ {failed} Datasheets couldn't be generated.")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
