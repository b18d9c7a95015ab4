"""Frontend (nvm/Node) and backend (pyenv/Poetry) toolchain setup."""

from pathlib import Path
from typing import Optional

from packaging.version import Version

from macdevsetup.constants import (
    LOCAL_BIN_PROFILE_LINE,
    NVM_INSTALL_URL,
    POETRY_INSTALL_URL,
    PYENV_PROFILE_LINES,
)
from macdevsetup.models import RunContext, StepStatus
from macdevsetup.reporting import log, warn


class NodeToolchainService:
    """nvm, the latest Node LTS, and Corepack shims for pnpm and yarn."""

    COREPACK_TOOLS = (("pnpm", "pnpm@latest"), ("yarn", "yarn@stable"))

    def __init__(self, logger, console, prompt, command_runner, script_installer):
        self.logger = logger
        self.console = console
        self.prompt = prompt
        self.command_runner = command_runner
        self.script_installer = script_installer

    @staticmethod
    def nvm_dir(ctx: RunContext) -> Path:
        return ctx.home / ".nvm"

    def _nvm_command(self, script: str):
        # nvm is a shell function, so every call sources it first.
        return ["bash", "-c", f'. "$NVM_DIR/nvm.sh" && {script}']

    def _nvm(self, ctx: RunContext, script: str, check: bool = True):
        return self.command_runner.run(self._nvm_command(script), check=check, env=ctx.env)

    def _nvm_output(self, ctx: RunContext, script: str) -> Optional[str]:
        return self.command_runner.output(self._nvm_command(script), env=ctx.env)

    def setup(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm("Install nvm + Node LTS + Corepack (pnpm/yarn)?"):
            warn(self.console, "Skipping Node/nvm setup.")
            return StepStatus.SKIPPED

        nvm_dir = self.nvm_dir(ctx)
        if nvm_dir.is_dir():
            log(self.console, "nvm directory already exists.")
        else:
            self.script_installer.run(
                NVM_INSTALL_URL.format(version=ctx.settings.nvm_version),
                "nvm",
                interpreter=["bash"],
                env=ctx.env,
            )

        ctx.env["NVM_DIR"] = str(nvm_dir)
        if not (nvm_dir / "nvm.sh").is_file():
            warn(
                self.console,
                "nvm didn't load in this session. Open a new terminal and run: nvm install --lts",
            )
            return StepStatus.SKIPPED

        self._nvm(ctx, "nvm install --lts")
        self._nvm(ctx, "nvm alias default 'lts/*'")
        node_version = self._nvm_output(ctx, "node -v") or "unknown"
        npm_version = self._nvm_output(ctx, "npm -v") or "unknown"
        log(self.console, f"Node: {node_version} | npm: {npm_version}")

        if self.prompt.confirm("Enable Corepack (recommended) and activate pnpm/yarn?"):
            self._enable_corepack(ctx)
        else:
            warn(self.console, "Skipping Corepack/pnpm/yarn activation.")
        return StepStatus.DONE

    def _enable_corepack(self, ctx: RunContext):
        self._nvm(ctx, "corepack enable", check=False)

        reports = []
        for tool, package_spec in self.COREPACK_TOOLS:
            result = self._nvm(ctx, f"corepack prepare {package_spec} --activate", check=False)
            if result.returncode != 0:
                fallback = self._nvm(ctx, f"npm i -g {tool}", check=False)
                if fallback.returncode != 0:
                    warn(self.console, f"Could not activate {tool}.")
            reports.append(f"{tool}: {self._nvm_output(ctx, f'{tool} -v') or 'not found'}")
        log(self.console, " | ".join(reports))


class PythonToolchainService:
    """pyenv with a pinned interpreter, and Poetry with in-project venvs."""

    PYENV_FORMULAE = ("pyenv", "xz")

    def __init__(
        self,
        logger,
        console,
        prompt,
        command_runner,
        script_installer,
        homebrew,
        profile,
        environment,
    ):
        self.logger = logger
        self.console = console
        self.prompt = prompt
        self.command_runner = command_runner
        self.script_installer = script_installer
        self.homebrew = homebrew
        self.profile = profile
        self.environment = environment

    def setup(self, ctx: RunContext) -> StepStatus:
        parsed = Version(ctx.settings.python_version)
        if not self.prompt.confirm(
            f"Install pyenv + Python {parsed.major}.{parsed.minor} + Poetry (project .venv)?"
        ):
            warn(self.console, "Skipping Python/Poetry setup.")
            return StepStatus.SKIPPED

        if ctx.has_brew:
            missing = self.homebrew.missing_formulae(ctx, self.PYENV_FORMULAE)
            if missing:
                self.homebrew.install(ctx, missing)
        else:
            warn(self.console, "Homebrew missing; skipping pyenv install.")

        for line in PYENV_PROFILE_LINES:
            self.profile.append_if_missing(line, ctx.profile_path)

        pyenv_root = ctx.home / ".pyenv"
        ctx.env["PYENV_ROOT"] = str(pyenv_root)
        ctx.prepend_path(str(pyenv_root / "bin"))

        if not self.environment.which("pyenv", ctx.env):
            warn(self.console, "pyenv not found in this session. Open a new terminal and try again.")
            return StepStatus.DONE

        # Same effect as `pyenv init -` for commands run from this process.
        ctx.prepend_path(str(pyenv_root / "shims"))
        self._install_interpreter(ctx)
        self._install_poetry(ctx)
        return StepStatus.DONE

    def installed_versions(self, ctx: RunContext):
        output = self.command_runner.output(["pyenv", "versions", "--bare"], env=ctx.env) or ""
        return {line.strip() for line in output.splitlines() if line.strip()}

    def _install_interpreter(self, ctx: RunContext):
        version = ctx.settings.python_version
        if not self.prompt.confirm(f"Install Python {version} via pyenv (can take time)?"):
            warn(self.console, "Skipping Python install via pyenv.")
            return

        if version in self.installed_versions(ctx):
            log(self.console, f"Python {version} already installed in pyenv.")
        else:
            self.command_runner.run(["pyenv", "install", version], env=ctx.env)

        self.command_runner.run(["pyenv", "global", version], env=ctx.env)
        reported = self.command_runner.output(["pyenv", "exec", "python", "-V"], env=ctx.env)
        log(self.console, f"Python: {reported or version}")
        self.command_runner.run(
            ["pyenv", "exec", "python", "-m", "pip", "install", "--upgrade", "pip", "setuptools", "wheel"],
            env=ctx.env,
        )

    def _install_poetry(self, ctx: RunContext):
        if not self.prompt.confirm("Install Poetry?"):
            warn(self.console, "Skipping Poetry.")
            return

        if self.environment.which("poetry", ctx.env):
            version = self.command_runner.output(["poetry", "--version"], env=ctx.env)
            log(self.console, f"Poetry already installed: {version or 'unknown version'}")
        else:
            self.script_installer.run(
                POETRY_INSTALL_URL,
                "Poetry",
                interpreter=["python3"],
                env=ctx.env,
            )
            self.profile.append_if_missing(LOCAL_BIN_PROFILE_LINE, ctx.profile_path)
            ctx.prepend_path(str(ctx.home / ".local" / "bin"))

        if not self.environment.which("poetry", ctx.env):
            warn(self.console, "Poetry not found after install (open a new terminal).")
            return

        self.command_runner.run(["poetry", "config", "virtualenvs.in-project", "true"], env=ctx.env)
        version = self.command_runner.output(["poetry", "--version"], env=ctx.env)
        log(self.console, f"Poetry: {version or 'unknown version'}")
        log(self.console, "Configured: Poetry venvs in-project (.venv)")
