"""Installer script downloads with progress reporting."""

import os
from urllib.parse import urlparse

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from macdevsetup.errors import SetupError
from macdevsetup.errors_catalog import actionable_error


class DownloadService:
    """Fetches third-party installer scripts over HTTPS."""

    def __init__(self, logger, console, requests_module, timeout: float = 60.0):
        self.logger = logger
        self.console = console
        self.requests = requests_module
        self.timeout = timeout

    def enforce_https(self, url: str, description: str):
        if urlparse(url).scheme.lower() != "https":
            raise SetupError(actionable_error("insecure_url", description=description, url=url))

    def fetch_script(self, url: str, dest_dir: str, description: str) -> str:
        """Download ``url`` into ``dest_dir`` and return the local path."""
        self.enforce_https(url, description)
        filename = os.path.basename(urlparse(url).path) or "install.sh"
        dest_path = os.path.join(dest_dir, filename)
        self.logger.info("Downloading %s to %s", url, dest_path)

        try:
            with self.requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                total_size = int(response.headers.get("Content-Length", 0))

                os.makedirs(dest_dir, exist_ok=True)

                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    BarColumn(),
                    TaskProgressColumn(),
                    "•",
                    TimeElapsedColumn(),
                    console=self.console,
                    transient=True,
                ) as progress:
                    task = progress.add_task(f"[cyan]{description}", total=total_size or None)
                    with open(dest_path, "wb") as file_obj:
                        for chunk in response.iter_content(chunk_size=8192):
                            if not chunk:
                                continue
                            file_obj.write(chunk)
                            progress.update(task, advance=len(chunk))
        except self.requests.RequestException as exc:
            raise SetupError(
                actionable_error("download_failed", description=description, reason=str(exc))
            ) from exc

        return dest_path
