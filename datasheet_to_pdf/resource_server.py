"""Local web server that serves datasheet folders (images, CSS, generated HTML) to Chromium."""

import re
from pathlib import Path
from typing import Dict, Optional

from aiohttp import web

from .console import log_debug, log_info
from .datasheet import Datasheet

DEFAULT_SERVER_PORT = 8123
SERVER_HOST = "localhost"


class WebResourceProvider:
    """Static file server with one mount per datasheet source directory.

    All mounts have to be added before :meth:`begin`; the mount table is
    read-only while the server is running.
    """

    def __init__(self, port: int = DEFAULT_SERVER_PORT, host: str = SERVER_HOST):
        self.port = port
        self.host = host
        self._app = web.Application()
        self._runner: Optional[web.AppRunner] = None
        self._mounts: Dict[Path, str] = {}

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    def _mount_name(self, datasheet: Datasheet) -> str:
        base = datasheet.identifier or datasheet.content_file_path.stem
        base = re.sub(r"[^\w.-]+", "-", base)
        name = base
        taken = set(self._mounts.values())
        counter = 2
        while name in taken:
            name = f"{base}-{counter}"
            counter += 1
        return name

    def add_resource(self, datasheet: Datasheet) -> str:
        """Serve the directory of ``datasheet`` and return its mount name."""
        if self.is_running:
            raise RuntimeError("Resources can't be added while the server is running")

        key = datasheet.content_file_path.resolve()
        if key in self._mounts:
            return self._mounts[key]

        name = self._mount_name(datasheet)
        self._app.router.add_static(f"/{name}", key.parent)
        self._mounts[key] = name
        log_debug(f"Serving {key.parent} at /{name}/")
        return name

    def resource_url(self, datasheet: Datasheet, filename: str) -> str:
        """URL of ``filename`` inside the served directory of ``datasheet``."""
        key = datasheet.content_file_path.resolve()
        if key not in self._mounts:
            raise KeyError(f"{datasheet.content_file_path} has not been added to the resource server")
        return f"http://{self.host}:{self.port}/{self._mounts[key]}/{filename}"

    async def begin(self) -> None:
        if self.is_running:
            return
        runner = web.AppRunner(self._app)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        log_info(f"Serving datasheet resources at http://{self.host}:{self.port}")

    async def end(self) -> None:
        if not self.is_running:
            return
        runner = self._runner
        self._runner = None
        await runner.cleanup()
