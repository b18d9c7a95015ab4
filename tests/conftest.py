import io
import os
import subprocess
from pathlib import Path

import pytest
from rich.console import Console

from macdevsetup.errors import SetupError
from macdevsetup.models import RunContext, SetupSettings


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None

    def error(self, *_args, **_kwargs):
        return None


class FakeCommandRunner:
    """Records commands; results are keyed by a command prefix.

    The first element of both the key and the command is compared by
    basename, so ``("brew", "install")`` matches ``/opt/homebrew/bin/brew install``.
    """

    def __init__(self, results=None, on_run=None):
        self.calls = []
        self.results = dict(results or {})
        self.on_run = on_run

    @staticmethod
    def _normalize(cmd):
        return (os.path.basename(cmd[0]),) + tuple(cmd[1:])

    def _lookup(self, cmd):
        normalized = self._normalize(cmd)
        best = None
        for key, value in self.results.items():
            if normalized[: len(key)] == tuple(key) and (best is None or len(key) > len(best[0])):
                best = (key, value)
        return best[1] if best else (0, "")

    def run(self, cmd, check=True, capture_output=False, env=None):
        self.calls.append(list(cmd))
        if self.on_run:
            self.on_run(list(cmd))
        returncode, stdout = self._lookup(cmd)
        if returncode != 0 and check:
            raise SetupError(f"Command failed ({returncode}): {' '.join(cmd)}")
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr="")

    def succeeds(self, cmd, env=None):
        return self.run(cmd, check=False, capture_output=True, env=env).returncode == 0

    def output(self, cmd, env=None):
        result = self.run(cmd, check=False, capture_output=True, env=env)
        if result.returncode != 0:
            return None
        return (result.stdout or "").strip()

    def ran(self, *prefix):
        return any(self._normalize(call)[: len(prefix)] == prefix for call in self.calls)


class FakeEnvironment:
    def __init__(self, system="Darwin", machine="arm64", root=False, commands=None):
        self._system = system
        self._machine = machine
        self._root = root
        self.commands = dict(commands or {})

    def system(self):
        return self._system

    def machine(self):
        return self._machine

    def is_macos(self):
        return self._system == "Darwin"

    def is_apple_silicon(self):
        return self._machine == "arm64"

    def is_root(self):
        return self._root

    def which(self, command, env=None):
        return self.commands.get(command)


class ScriptedPrompt:
    """Answers ``confirm`` from a mapping, defaulting to no."""

    def __init__(self, confirms=None, answers=None, choice=None, default=False):
        self.confirms = dict(confirms or {})
        self.answers = dict(answers or {})
        self.choice = choice
        self.default = default
        self.asked = []
        self.menus = []

    def confirm(self, prompt):
        self.asked.append(prompt)
        return self.confirms.get(prompt, self.default)

    def ask(self, prompt):
        self.asked.append(prompt)
        return self.answers.get(prompt, "")

    def choose(self, title, options, skip_label="Skip"):
        self.menus.append(title)
        return self.choice


class FakeDownloadService:
    def __init__(self):
        self.urls = []

    def fetch_script(self, url, dest_dir, description):
        self.urls.append(url)
        path = Path(dest_dir) / "install.sh"
        path.write_text("#!/bin/sh\n", encoding="utf-8")
        return str(path)


@pytest.fixture
def dummy_logger():
    return DummyLogger()


@pytest.fixture
def console():
    return Console(record=True, file=io.StringIO(), width=200)


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def make_context(home):
    def factory(brew_bin=None, settings=None, docker_runtime=None):
        return RunContext(
            home=home,
            profile_path=home / ".zprofile",
            env={"PATH": "/usr/bin:/bin"},
            settings=settings or SetupSettings(),
            docker_runtime=docker_runtime,
            brew_bin=brew_bin,
        )

    return factory
