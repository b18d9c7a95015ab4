import logging
import os
from pathlib import Path
from typing import List, Optional

import requests
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .constants import HOMEBREW_INSTALL_URL, OH_MY_ZSH_INSTALL_URL
from .errors import SetupError
from .errors_catalog import actionable_error
from .models import (
    DockerRuntime,
    FailurePolicy,
    RunContext,
    SetupSettings,
    Step,
    StepResult,
    StepStatus,
    expand_home,
)
from .reporting import error, log, plain, warn
from .services.command_runner import CommandRunner
from .services.docker_runtime import DockerRuntimeService
from .services.download import DownloadService
from .services.environment import EnvironmentProbe
from .services.filesystem import FileSystemService
from .services.git_setup import GitSetupService
from .services.homebrew import HomebrewService
from .services.installer import ScriptInstaller
from .services.profile import ProfileService
from .services.prompt import PromptService
from .services.sequencer import StepSequencer
from .services.toolchains import NodeToolchainService, PythonToolchainService

console = Console()
logger = logging.getLogger("macdevsetup")


class WorkstationSetup:
    SUGGESTED_CHECKS = (
        "node -v && npm -v",
        "pnpm -v  (if enabled)",
        "python -V",
        "poetry --version",
        "docker version  (if installed)",
        "psql --version  (if installed)",
        "redis-cli ping  (if installed)",
    )
    STATUS_STYLES = {
        StepStatus.DONE: "green",
        StepStatus.ALREADY_PRESENT: "cyan",
        StepStatus.SKIPPED: "dim",
        StepStatus.WARNED: "yellow",
        StepStatus.FAILED: "red",
    }

    def __init__(
        self,
        docker_runtime: Optional[DockerRuntime] = None,
        settings: Optional[SetupSettings] = None,
        home: Optional[Path] = None,
        environment: Optional[EnvironmentProbe] = None,
        command_runner: Optional[CommandRunner] = None,
        prompt: Optional[PromptService] = None,
        download_service: Optional[DownloadService] = None,
        brew_candidates=None,
    ):
        self.settings = settings or SetupSettings()
        self.home = Path(home) if home else Path.home()

        self.environment = environment or EnvironmentProbe()
        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.prompt = prompt or PromptService(console=console)
        self.download_service = download_service or DownloadService(
            logger=logger,
            console=console,
            requests_module=requests,
        )
        self.filesystem_service = FileSystemService(logger=logger, console=console)
        self.profile_service = ProfileService(logger=logger)
        self.script_installer = ScriptInstaller(
            download_service=self.download_service,
            command_runner=self.command_runner,
            logger=logger,
        )

        homebrew_kwargs = {}
        if brew_candidates is not None:
            homebrew_kwargs["candidates"] = brew_candidates
        self.homebrew = HomebrewService(
            command_runner=self.command_runner,
            environment=self.environment,
            logger=logger,
            **homebrew_kwargs,
        )
        self.docker_runtime_service = DockerRuntimeService(
            logger=logger,
            console=console,
            homebrew=self.homebrew,
            prompt=self.prompt,
            command_runner=self.command_runner,
            environment=self.environment,
        )
        self.git_setup_service = GitSetupService(
            logger=logger,
            console=console,
            prompt=self.prompt,
            command_runner=self.command_runner,
            environment=self.environment,
            filesystem=self.filesystem_service,
        )
        self.node_service = NodeToolchainService(
            logger=logger,
            console=console,
            prompt=self.prompt,
            command_runner=self.command_runner,
            script_installer=self.script_installer,
        )
        self.python_service = PythonToolchainService(
            logger=logger,
            console=console,
            prompt=self.prompt,
            command_runner=self.command_runner,
            script_installer=self.script_installer,
            homebrew=self.homebrew,
            profile=self.profile_service,
            environment=self.environment,
        )
        self.sequencer = StepSequencer(logger=logger, console=console)

        self.run_context = RunContext(
            home=self.home,
            profile_path=expand_home(self.settings.profile_file, self.home),
            env=dict(os.environ),
            settings=self.settings,
            docker_runtime=docker_runtime,
        )

    def build_steps(self) -> List[Step]:
        """The fixed step order and each step's failure policy.

        FATAL steps install something later work depends on; WARN steps are
        conveniences whose failure should not stop the run.
        """
        return [
            Step(
                "xcode_clt",
                "Xcode Command Line Tools",
                FailurePolicy.WARN,
                self.install_xcode_clt,
                precondition=self.xcode_clt_present,
            ),
            Step(
                "homebrew",
                "Homebrew",
                FailurePolicy.FATAL,
                self.install_homebrew,
                precondition=self.homebrew_present,
            ),
            Step(
                "homebrew_update",
                "Homebrew update",
                FailurePolicy.WARN,
                self.update_homebrew,
                requires_brew=True,
            ),
            Step(
                "core_packages",
                "Core CLI packages (git, jq, ripgrep, fd, fzf, direnv, etc.)",
                FailurePolicy.FATAL,
                self.install_core_packages,
                requires_brew=True,
            ),
            Step(
                "git_config",
                "Git configuration",
                FailurePolicy.WARN,
                self.git_setup_service.configure_git,
            ),
            Step(
                "ssh_key",
                "SSH key (GitHub/GitLab)",
                FailurePolicy.WARN,
                self.git_setup_service.generate_key,
                precondition=self.git_setup_service.existing_key,
            ),
            Step("node", "Node.js via nvm", FailurePolicy.FATAL, self.node_service.setup),
            Step(
                "python",
                "Python via pyenv + Poetry",
                FailurePolicy.FATAL,
                self.python_service.setup,
            ),
            Step(
                "databases",
                "Postgres + Redis (Brew services)",
                FailurePolicy.FATAL,
                self.install_databases,
                requires_brew=True,
            ),
            Step(
                "docker",
                "Docker runtime",
                FailurePolicy.FATAL,
                self.docker_runtime_service.setup,
            ),
            Step(
                "editor",
                "VS Code",
                FailurePolicy.WARN,
                self.install_editor,
                requires_brew=True,
            ),
            Step(
                "oh_my_zsh",
                "Oh My Zsh (shell UX)",
                FailurePolicy.WARN,
                self.install_oh_my_zsh,
                precondition=self.oh_my_zsh_present,
            ),
            Step(
                "workspace",
                "Workspace folders",
                FailurePolicy.FATAL,
                self.create_workspace,
                precondition=self.workspace_present,
            ),
        ]

    def xcode_clt_present(self, ctx: RunContext) -> Optional[str]:
        if self.command_runner.succeeds(["xcode-select", "-p"], env=ctx.env):
            return "Xcode Command Line Tools already installed."
        return None

    def install_xcode_clt(self, ctx: RunContext) -> StepStatus:
        warn(console, "Xcode Command Line Tools not found.")
        if not self.prompt.confirm("Install Xcode Command Line Tools now?"):
            warn(console, "Skipping Xcode Command Line Tools. Some installs may fail without it.")
            return StepStatus.SKIPPED

        # Exits non-zero when an install request is already pending.
        self.command_runner.run(["xcode-select", "--install"], check=False, env=ctx.env)
        warn(console, "A dialog may appear. Complete install, then re-run this script if needed.")
        return StepStatus.DONE

    def homebrew_present(self, ctx: RunContext) -> Optional[str]:
        if ctx.has_brew:
            return f"Homebrew already installed at: {ctx.brew_bin}"
        return None

    def install_homebrew(self, ctx: RunContext) -> StepStatus:
        warn(console, "Homebrew not found.")
        if not self.prompt.confirm("Install Homebrew?"):
            warn(console, "Skipping Homebrew. Most steps require it.")
            return StepStatus.SKIPPED

        self.script_installer.run(
            HOMEBREW_INSTALL_URL,
            "Homebrew",
            interpreter=["/bin/bash"],
            env=ctx.env,
        )
        if not self.homebrew.refresh(ctx):
            raise SetupError(actionable_error("brew_missing_after_install"))

        self.profile_service.append_if_missing(
            self.homebrew.shellenv_line(ctx.apple_silicon),
            ctx.profile_path,
        )
        log(console, f"Homebrew installed at: {ctx.brew_bin}")
        return StepStatus.DONE

    def update_homebrew(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm("Run 'brew update'?"):
            warn(console, "Skipping brew update.")
            return StepStatus.SKIPPED
        self.homebrew.update(ctx)
        return StepStatus.DONE

    def install_core_packages(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm("Install core CLI packages via Homebrew?"):
            warn(console, "Skipping core CLI packages.")
            return StepStatus.SKIPPED

        missing = self.homebrew.missing_formulae(ctx, ctx.settings.core_packages)
        if missing:
            self.homebrew.install(ctx, missing)
        else:
            log(console, "Core CLI packages already installed.")

        self._offer_fzf_bindings(ctx)
        return StepStatus.DONE

    def _offer_fzf_bindings(self, ctx: RunContext):
        prefix = self.homebrew.prefix(ctx)
        if not prefix:
            return
        fzf_installer = Path(prefix) / "opt" / "fzf" / "install"
        if not fzf_installer.is_file():
            return
        if self.prompt.confirm("Enable fzf key bindings + shell completion?"):
            result = self.command_runner.run(
                [str(fzf_installer), "--key-bindings", "--completion", "--no-update-rc"],
                check=False,
                capture_output=True,
                env=ctx.env,
            )
            if result.returncode != 0:
                warn(console, "fzf key bindings could not be enabled.")

    def install_databases(self, ctx: RunContext) -> StepStatus:
        formulae = ctx.settings.database_formulae
        if not self.prompt.confirm("Install Postgres 16 + Redis via Homebrew?"):
            warn(console, "Skipping Postgres/Redis.")
            return StepStatus.SKIPPED

        missing = self.homebrew.missing_formulae(ctx, formulae)
        if missing:
            self.homebrew.install(ctx, missing)
        else:
            log(console, f"Already installed: {', '.join(formulae)}")

        if self.prompt.confirm(
            "Start Postgres + Redis now using brew services (runs in background)?"
        ):
            for formula in formulae:
                if not self.homebrew.start_service(ctx, formula):
                    warn(console, f"Could not start {formula}; try: brew services start {formula}")
            log(console, "Started Postgres + Redis (brew services).")
        else:
            warn(console, "Skipping starting services. You can start later with:")
            for formula in formulae:
                plain(console, f"  brew services start {formula}")
        return StepStatus.DONE

    def install_editor(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm("Install Visual Studio Code (cask)?"):
            warn(console, "Skipping VS Code.")
            return StepStatus.SKIPPED

        if self.homebrew.has_cask(ctx, "visual-studio-code"):
            log(console, "VS Code already installed.")
        else:
            self.homebrew.install_cask(ctx, "visual-studio-code")
        warn(console, "To enable 'code' command: VS Code → Cmd+Shift+P → Install 'code' command in PATH")
        return StepStatus.DONE

    def oh_my_zsh_present(self, ctx: RunContext) -> Optional[str]:
        if (ctx.home / ".oh-my-zsh").is_dir():
            return "Oh My Zsh already installed; skipping."
        return None

    def install_oh_my_zsh(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm("Install Oh My Zsh? (optional)"):
            warn(console, "Skipping Oh My Zsh.")
            return StepStatus.SKIPPED

        self.script_installer.run(
            OH_MY_ZSH_INSTALL_URL,
            "Oh My Zsh",
            interpreter=["sh"],
            args=["--unattended"],
            env=ctx.env,
        )
        warn(console, "Oh My Zsh installed. Customize ~/.zshrc as needed.")
        return StepStatus.DONE

    def _workspace_label(self, ctx: RunContext) -> str:
        names = ",".join(ctx.settings.workspace_dirs)
        return f"{ctx.settings.workspace_root}/{{{names}}}"

    def workspace_present(self, ctx: RunContext) -> Optional[str]:
        if not self.filesystem_service.missing_dirs(ctx.workspace_paths):
            return f"Workspace folders already exist: {self._workspace_label(ctx)}"
        return None

    def create_workspace(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm(f"Create {self._workspace_label(ctx)} folders?"):
            warn(console, "Skipping workspace folders.")
            return StepStatus.SKIPPED

        for path in self.filesystem_service.missing_dirs(ctx.workspace_paths):
            self.filesystem_service.ensure_dir(path)
        log(console, f"Created: {self._workspace_label(ctx)}")
        return StepStatus.DONE

    def print_summary(self, results: List[StepResult]):
        table = Table(title="Setup summary", show_header=True, header_style="bold")
        table.add_column("Step")
        table.add_column("Result")
        for result in results:
            style = self.STATUS_STYLES[result.status]
            table.add_row(result.name, f"[{style}]{result.status.value}[/{style}]")
        console.print(table)

    def run(self) -> int:
        ctx = self.run_context
        try:
            if not self.environment.is_macos():
                error(console, actionable_error("unsupported_platform", system=self.environment.system()))
                return 1

            ctx.apple_silicon = self.environment.is_apple_silicon()
            self.homebrew.refresh(ctx)

            log(console, "Interactive macOS frontend + backend dev setup")
            logger.debug("Run context: brew=%s apple_silicon=%s", ctx.brew_bin, ctx.apple_silicon)

            if self.environment.is_root():
                warn(console, "You are running this script as root (sudo). This can hide Homebrew and confuse installs.")
                warn(console, "Recommended: run as your normal user (no sudo), and only enter sudo when prompted.")

            results = self.sequencer.run(self.build_steps(), ctx)

            log(console, "All done ✅")
            self.print_summary(results)
            warn(console, f"Open a NEW terminal so any {ctx.profile_path.name} changes take effect.")
            plain(console)
            plain(console, "Suggested quick checks:")
            for check in self.SUGGESTED_CHECKS:
                plain(console, f"  {check}")
            return 0

        except KeyboardInterrupt:
            console.print("\n[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            return 1
        except SetupError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            logger.error(str(exc))
            self.print_summary(self.sequencer.results)
            return 1
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(exc))}")
            logger.exception("Unexpected error")
            return 1
