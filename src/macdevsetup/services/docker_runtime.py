"""Container runtime selection and installation for macdevsetup."""

from pathlib import Path
from typing import Callable, Dict, Optional

from macdevsetup.models import DockerRuntime, RunContext, StepStatus
from macdevsetup.reporting import log, warn


class DockerRuntimeService:
    """Picks one of Docker Desktop, Colima or OrbStack and installs it."""

    MENU = (
        (DockerRuntime.DESKTOP, "Docker Desktop  (most compatible / common default)"),
        (DockerRuntime.COLIMA, "Colima          (lightweight, CLI-only runtime)"),
        (DockerRuntime.ORBSTACK, "OrbStack        (fast Docker Desktop alternative)"),
    )
    COLIMA_FORMULAE = ("colima", "docker", "docker-compose")
    ORBSTACK_APP = "OrbStack.app"

    def __init__(self, logger, console, homebrew, prompt, command_runner, environment):
        self.logger = logger
        self.console = console
        self.homebrew = homebrew
        self.prompt = prompt
        self.command_runner = command_runner
        self.environment = environment

    def resolve(self, preselected: Optional[DockerRuntime]) -> DockerRuntime:
        """A preselected runtime (flag or config) bypasses the menu."""
        if preselected is not None:
            return preselected

        index = self.prompt.choose(
            "Pick a Docker runtime to install:",
            [label for _, label in self.MENU],
            skip_label="Skip Docker",
        )
        if index is None:
            warn(self.console, "No Docker runtime selected; skipping Docker.")
            return DockerRuntime.SKIP
        return self.MENU[index][0]

    def setup(self, ctx: RunContext) -> StepStatus:
        runtime = self.resolve(ctx.docker_runtime)
        ctx.docker_runtime = runtime
        self.logger.info("Docker runtime: %s", runtime.value)

        if runtime is DockerRuntime.SKIP:
            warn(self.console, "Docker step skipped.")
            return StepStatus.SKIPPED

        installers: Dict[DockerRuntime, Callable[[RunContext], StepStatus]] = {
            DockerRuntime.DESKTOP: self.install_desktop,
            DockerRuntime.COLIMA: self.install_colima,
            DockerRuntime.ORBSTACK: self.install_orbstack,
        }
        if not ctx.has_brew:
            warn(self.console, f"Homebrew missing; cannot install {runtime.value} via brew.")
            status = StepStatus.SKIPPED
        else:
            status = installers[runtime](ctx)

        self.quick_check(ctx)
        return status

    def _install_cask(self, ctx: RunContext, cask: str, label: str):
        if self.homebrew.has_cask(ctx, cask):
            log(self.console, f"{label} already installed.")
        else:
            self.homebrew.install_cask(ctx, cask)

    def install_desktop(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm("Install Docker Desktop (cask: docker-desktop)?"):
            warn(self.console, "Skipped Docker Desktop.")
            return StepStatus.SKIPPED

        self._install_cask(ctx, "docker-desktop", "Docker Desktop")
        warn(self.console, "After install: open Docker Desktop once to finish permissions/setup.")
        return StepStatus.DONE

    def install_colima(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm(
            "Install Colima + Docker CLI + docker-compose (lightweight setup)?"
        ):
            warn(self.console, "Skipped Colima.")
            return StepStatus.SKIPPED

        missing = self.homebrew.missing_formulae(ctx, self.COLIMA_FORMULAE)
        if missing:
            self.homebrew.install(ctx, missing)
        else:
            log(self.console, "Colima, Docker CLI and docker-compose already installed.")

        # Colima has no app to launch, so offer to start the VM here.
        if self.prompt.confirm("Start Colima now? (colima start)"):
            result = self.command_runner.run(["colima", "start"], check=False, env=ctx.env)
            if result.returncode == 0:
                log(self.console, "Colima started. Docker should work now.")
            else:
                warn(self.console, "colima start failed; retry later with: colima start")
        else:
            warn(self.console, "You can start later: colima start")
        return StepStatus.DONE

    def install_orbstack(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm("Install OrbStack (cask: orbstack)?"):
            warn(self.console, "Skipped OrbStack.")
            return StepStatus.SKIPPED

        self._install_cask(ctx, "orbstack", "OrbStack")
        app_dirs = (Path("/Applications"), ctx.home / "Applications")
        if any((app_dir / self.ORBSTACK_APP).is_dir() for app_dir in app_dirs):
            log(self.console, "OrbStack app detected.")
        else:
            warn(
                self.console,
                "OrbStack installed via brew, but OrbStack.app not found in /Applications. "
                "If needed: brew reinstall --cask orbstack",
            )
        warn(self.console, "After install: open OrbStack once to initialize (then: docker version).")
        return StepStatus.DONE

    def quick_check(self, ctx: RunContext) -> bool:
        """Report whether ``docker version`` works. Never raises."""
        log(self.console, "Docker quick check (non-fatal)")
        if not self.environment.which("docker", ctx.env):
            warn(
                self.console,
                "docker command not found yet. This is normal until you install Desktop/Colima "
                "or OrbStack provides it.",
            )
            return False

        if self.command_runner.succeeds(["docker", "version"], env=ctx.env):
            log(self.console, "docker CLI works (docker version succeeded)")
            return True

        warn(
            self.console,
            "docker CLI present but runtime not initialized yet "
            "(open OrbStack/Desktop or start Colima)",
        )
        return False
