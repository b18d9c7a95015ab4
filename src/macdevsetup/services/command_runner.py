"""Subprocess execution service for macdevsetup."""

import subprocess
from typing import Dict, List, Optional

from macdevsetup.errors import SetupError
from macdevsetup.errors_catalog import actionable_error


class CommandRunner:
    """Runs external installers with consistent error handling."""

    def __init__(self, logger):
        self.logger = logger

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                env=env,
            )
        except FileNotFoundError as exc:
            raise SetupError(actionable_error("command_not_found", command=cmd[0])) from exc
        except OSError as exc:
            raise SetupError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = actionable_error(
            "installer_failed",
            description=f"Command `{cmd_str}`",
            returncode=str(result.returncode),
        )
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise SetupError(message)

        self.logger.debug(message)
        return result

    def succeeds(self, cmd: List[str], env: Optional[Dict[str, str]] = None) -> bool:
        """Probe a command quietly; a missing executable counts as failure."""
        try:
            result = self.run(cmd, check=False, capture_output=True, env=env)
        except SetupError:
            return False
        return result.returncode == 0

    def output(self, cmd: List[str], env: Optional[Dict[str, str]] = None) -> Optional[str]:
        """Stdout of a successful probe, ``None`` when the command fails."""
        try:
            result = self.run(cmd, check=False, capture_output=True, env=env)
        except SetupError:
            return None
        if result.returncode != 0:
            return None
        return (result.stdout or "").strip()
