"""Git global configuration and SSH key generation."""

import re
from pathlib import Path
from typing import Optional

from macdevsetup.constants import SSH_DIR_MODE
from macdevsetup.models import RunContext, StepStatus
from macdevsetup.reporting import log, plain, warn


class GitSetupService:
    """Configures git defaults and creates an ed25519 key for Git hosting."""

    GIT_DEFAULTS = (
        ("init.defaultBranch", "main"),
        ("pull.rebase", "false"),
        ("core.autocrlf", "input"),
    )
    AGENT_VARIABLE = re.compile(r"(SSH_AUTH_SOCK|SSH_AGENT_PID)=([^;]+);")

    def __init__(self, logger, console, prompt, command_runner, environment, filesystem):
        self.logger = logger
        self.console = console
        self.prompt = prompt
        self.command_runner = command_runner
        self.environment = environment
        self.filesystem = filesystem

    def _git_config(self, ctx: RunContext, key: str, value: str):
        self.command_runner.run(["git", "config", "--global", key, value], env=ctx.env)

    def configure_git(self, ctx: RunContext) -> StepStatus:
        if not self.environment.which("git", ctx.env):
            warn(self.console, "git not found on PATH; skipping git config.")
            warn(
                self.console,
                "If you installed git via brew above, open a NEW terminal or re-run this script.",
            )
            return StepStatus.SKIPPED

        changed = False
        if self.prompt.confirm("Set global git defaults (main branch, pull behavior, autocrlf)?"):
            for key, value in self.GIT_DEFAULTS:
                self._git_config(ctx, key, value)
            changed = True

        if self.prompt.confirm("Set global git user.name and user.email now?"):
            name = self.prompt.ask("Git user.name")
            email = self.prompt.ask("Git user.email")
            if name:
                self._git_config(ctx, "user.name", name)
            if email:
                self._git_config(ctx, "user.email", email)
            changed = changed or bool(name or email)

        return StepStatus.DONE if changed else StepStatus.SKIPPED

    @staticmethod
    def key_path(ctx: RunContext) -> Path:
        return ctx.home / ".ssh" / "id_ed25519"

    def existing_key(self, ctx: RunContext) -> Optional[str]:
        path = self.key_path(ctx)
        if path.exists():
            return f"SSH key already exists at {path} (skipping)."
        return None

    def generate_key(self, ctx: RunContext) -> StepStatus:
        if not self.prompt.confirm("Generate an SSH key (ed25519) for Git hosting?"):
            warn(self.console, "Skipping SSH key generation.")
            return StepStatus.SKIPPED

        email = self.prompt.ask("Email label for SSH key")
        path = self.key_path(ctx)
        self.filesystem.ensure_dir(path.parent, mode=SSH_DIR_MODE)
        self.filesystem.set_permissions(path.parent, SSH_DIR_MODE)
        self.command_runner.run(
            ["ssh-keygen", "-t", "ed25519", "-C", email, "-f", str(path)],
            env=ctx.env,
        )
        self._add_to_agent(ctx, path)

        public_key = path.with_name(f"{path.name}.pub")
        if public_key.exists():
            log(self.console, "Public key (add to GitHub/GitLab):")
            plain(self.console, public_key.read_text(encoding="utf-8").strip())
        return StepStatus.DONE

    def _add_to_agent(self, ctx: RunContext, path: Path):
        # The agent is left running for the user's session; nothing tracks it.
        agent_output = self.command_runner.output(["ssh-agent", "-s"], env=ctx.env)
        if agent_output is None:
            warn(self.console, "Could not start ssh-agent; add the key later with: ssh-add")
            return

        for name, value in self.AGENT_VARIABLE.findall(agent_output):
            ctx.env[name] = value

        if not self.command_runner.succeeds(["ssh-add", str(path)], env=ctx.env):
            warn(self.console, f"ssh-add failed; add the key later with: ssh-add {path}")
