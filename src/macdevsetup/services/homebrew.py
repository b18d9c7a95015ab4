"""Homebrew discovery and invocation for macdevsetup."""

import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

from macdevsetup.constants import APPLE_SILICON_BREW, BREW_CANDIDATES, INTEL_BREW
from macdevsetup.errors import SetupError
from macdevsetup.models import RunContext


class HomebrewService:
    """Locates ``brew`` and wraps the subcommands the setup steps need.

    A freshly installed Homebrew is usually not on the calling process's
    PATH, because shell profiles are only read by new sessions. ``locate``
    therefore also checks the two conventional install prefixes, and can be
    called again after an install within the same process.
    """

    def __init__(
        self,
        command_runner,
        environment,
        logger,
        candidates: Sequence[str] = BREW_CANDIDATES,
    ):
        self.command_runner = command_runner
        self.environment = environment
        self.logger = logger
        self.candidates = tuple(candidates)

    def locate(self, ctx: RunContext) -> Optional[str]:
        found = self.environment.which("brew", ctx.env)
        if found:
            return found

        for candidate in self.candidates:
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                return candidate
        return None

    def refresh(self, ctx: RunContext) -> Optional[str]:
        """Re-run the locator and activate whatever it finds."""
        brew_bin = self.locate(ctx)
        ctx.brew_bin = brew_bin
        if brew_bin:
            self.activate(ctx, brew_bin)
        return brew_bin

    def activate(self, ctx: RunContext, brew_bin: str):
        prefix = Path(brew_bin).parent.parent
        ctx.env["HOMEBREW_PREFIX"] = str(prefix)
        ctx.prepend_path(str(prefix / "bin"), str(prefix / "sbin"))
        self.logger.debug("Activated Homebrew at prefix %s", prefix)

    @staticmethod
    def shellenv_line(apple_silicon: bool) -> str:
        brew_bin = APPLE_SILICON_BREW if apple_silicon else INTEL_BREW
        return f'eval "$({brew_bin} shellenv)"'

    def _brew(self, ctx: RunContext, *args: str, check: bool = True, capture_output: bool = False):
        if not ctx.brew_bin:
            raise SetupError("Homebrew is not available in this session.")
        return self.command_runner.run(
            [ctx.brew_bin, *args],
            check=check,
            capture_output=capture_output,
            env=ctx.env,
        )

    def update(self, ctx: RunContext):
        self._brew(ctx, "update")

    def prefix(self, ctx: RunContext) -> Optional[str]:
        result = self._brew(ctx, "--prefix", check=False, capture_output=True)
        if result.returncode != 0:
            return None
        return (result.stdout or "").strip() or None

    def installed_formulae(self, ctx: RunContext) -> Set[str]:
        return self._list(ctx, "--formula")

    def installed_casks(self, ctx: RunContext) -> Set[str]:
        return self._list(ctx, "--cask")

    def _list(self, ctx: RunContext, kind: str) -> Set[str]:
        result = self._brew(ctx, "list", kind, "-1", check=False, capture_output=True)
        if result.returncode != 0:
            return set()
        return {line.strip() for line in (result.stdout or "").splitlines() if line.strip()}

    def has_cask(self, ctx: RunContext, cask: str) -> bool:
        return ctx.has_brew and cask in self.installed_casks(ctx)

    def missing_formulae(self, ctx: RunContext, formulae: Iterable[str]) -> List[str]:
        installed = self.installed_formulae(ctx)
        return [formula for formula in formulae if formula not in installed]

    def install(self, ctx: RunContext, formulae: Sequence[str]):
        self._brew(ctx, "install", *formulae)

    def install_cask(self, ctx: RunContext, cask: str):
        self._brew(ctx, "install", "--cask", cask)

    def start_service(self, ctx: RunContext, formula: str) -> bool:
        result = self._brew(ctx, "services", "start", formula, check=False)
        return result.returncode == 0
