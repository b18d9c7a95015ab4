"""Shared domain models for macdevsetup."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from .constants import (
    DEFAULT_CORE_PACKAGES,
    DEFAULT_DATABASE_FORMULAE,
    DEFAULT_NVM_VERSION,
    DEFAULT_PROFILE_FILE,
    DEFAULT_PYTHON_VERSION,
    DEFAULT_WORKSPACE_DIRS,
    DEFAULT_WORKSPACE_ROOT,
)


def expand_home(value: str, home: Path) -> Path:
    if value == "~" or value.startswith("~/"):
        return home / value[2:]
    return Path(value)


class DockerRuntime(str, Enum):
    """Container runtimes the setup knows how to install."""

    DESKTOP = "desktop"
    COLIMA = "colima"
    ORBSTACK = "orbstack"
    SKIP = "skip"

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)


class FailurePolicy(str, Enum):
    FATAL = "fatal"
    WARN = "warn"


class StepStatus(str, Enum):
    DONE = "done"
    ALREADY_PRESENT = "already_present"
    SKIPPED = "skipped"
    WARNED = "warned"
    FAILED = "failed"


@dataclass(frozen=True)
class SetupSettings:
    """User-tunable values, usually loaded from the config file."""

    profile_file: str = DEFAULT_PROFILE_FILE
    python_version: str = DEFAULT_PYTHON_VERSION
    nvm_version: str = DEFAULT_NVM_VERSION
    core_packages: Tuple[str, ...] = DEFAULT_CORE_PACKAGES
    database_formulae: Tuple[str, ...] = DEFAULT_DATABASE_FORMULAE
    workspace_root: str = DEFAULT_WORKSPACE_ROOT
    workspace_dirs: Tuple[str, ...] = DEFAULT_WORKSPACE_DIRS


@dataclass
class RunContext:
    """Mutable state threaded through every step of one run."""

    home: Path
    profile_path: Path
    env: Dict[str, str]
    settings: SetupSettings = field(default_factory=SetupSettings)
    docker_runtime: Optional[DockerRuntime] = None
    brew_bin: Optional[str] = None
    apple_silicon: bool = False

    @property
    def has_brew(self) -> bool:
        return bool(self.brew_bin)

    @property
    def workspace_paths(self) -> Tuple[Path, ...]:
        root = expand_home(self.settings.workspace_root, self.home)
        return tuple(root / name for name in self.settings.workspace_dirs)

    def prepend_path(self, *directories: str):
        prefix = [str(directory) for directory in directories]
        rest = [
            entry
            for entry in self.env.get("PATH", "").split(":")
            if entry and entry not in prefix
        ]
        self.env["PATH"] = ":".join(prefix + rest)


@dataclass(frozen=True)
class Step:
    """One entry of the step table.

    ``precondition`` returns a message when the step's target is already
    satisfied, ``None`` otherwise. ``action`` prompts, acts, and returns the
    resulting status (``DONE`` or ``SKIPPED``).
    """

    name: str
    title: str
    policy: FailurePolicy
    action: Callable[[RunContext], StepStatus]
    precondition: Optional[Callable[[RunContext], Optional[str]]] = None
    requires_brew: bool = False


@dataclass(frozen=True)
class StepResult:
    name: str
    status: StepStatus
    detail: str = ""
