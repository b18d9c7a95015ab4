"""Host environment probing for macdevsetup."""

import os
import platform
import shutil
from typing import Dict, Optional


class EnvironmentProbe:
    """Answers questions about the host OS, architecture and search path."""

    def system(self) -> str:
        return platform.system()

    def machine(self) -> str:
        return platform.machine()

    def is_macos(self) -> bool:
        return self.system() == "Darwin"

    def is_apple_silicon(self) -> bool:
        return self.machine() == "arm64"

    def is_root(self) -> bool:
        geteuid = getattr(os, "geteuid", None)
        return bool(geteuid) and geteuid() == 0

    def which(self, command: str, env: Optional[Dict[str, str]] = None) -> Optional[str]:
        search_path = (env or os.environ).get("PATH")
        return shutil.which(command, path=search_path)
