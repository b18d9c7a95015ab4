"""Runs downloaded third-party installer scripts."""

import tempfile
from typing import Dict, Optional, Sequence


class ScriptInstaller:
    """Downloads an installer script to a temp dir and executes it."""

    def __init__(self, download_service, command_runner, logger):
        self.download_service = download_service
        self.command_runner = command_runner
        self.logger = logger

    def run(
        self,
        url: str,
        description: str,
        interpreter: Sequence[str],
        args: Sequence[str] = (),
        env: Optional[Dict[str, str]] = None,
    ):
        with tempfile.TemporaryDirectory(prefix="macdevsetup-") as temp_dir:
            script_path = self.download_service.fetch_script(url, temp_dir, description)
            self.logger.info("Running %s installer", description)
            self.command_runner.run([*interpreter, script_path, *args], env=env)
