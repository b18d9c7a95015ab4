from conftest import FakeCommandRunner, FakeEnvironment, ScriptedPrompt

from macdevsetup.models import StepStatus
from macdevsetup.services.filesystem import FileSystemService
from macdevsetup.services.git_setup import GitSetupService

AGENT_OUTPUT = (
    "SSH_AUTH_SOCK=/tmp/ssh-abc/agent.42; export SSH_AUTH_SOCK;\n"
    "SSH_AGENT_PID=43; export SSH_AGENT_PID;\n"
    "echo Agent pid 43;\n"
)


def make_service(dummy_logger, console, runner, prompt, environment=None):
    return GitSetupService(
        logger=dummy_logger,
        console=console,
        prompt=prompt,
        command_runner=runner,
        environment=environment or FakeEnvironment(commands={"git": "/usr/bin/git"}),
        filesystem=FileSystemService(logger=dummy_logger, console=console),
    )


def test_configure_git_skips_when_git_missing(dummy_logger, console, make_context):
    runner = FakeCommandRunner()
    prompt = ScriptedPrompt(default=True)
    service = make_service(dummy_logger, console, runner, prompt, environment=FakeEnvironment())

    assert service.configure_git(make_context()) is StepStatus.SKIPPED
    assert runner.calls == []
    assert prompt.asked == []


def test_configure_git_sets_defaults_and_identity(dummy_logger, console, make_context):
    runner = FakeCommandRunner()
    prompt = ScriptedPrompt(
        default=True,
        answers={"Git user.name": "Ada Lovelace", "Git user.email": "ada@example.com"},
    )
    service = make_service(dummy_logger, console, runner, prompt)

    assert service.configure_git(make_context()) is StepStatus.DONE
    assert runner.calls == [
        ["git", "config", "--global", "init.defaultBranch", "main"],
        ["git", "config", "--global", "pull.rebase", "false"],
        ["git", "config", "--global", "core.autocrlf", "input"],
        ["git", "config", "--global", "user.name", "Ada Lovelace"],
        ["git", "config", "--global", "user.email", "ada@example.com"],
    ]


def test_existing_key_is_reported(dummy_logger, console, make_context, home):
    (home / ".ssh").mkdir()
    (home / ".ssh" / "id_ed25519").write_text("key", encoding="utf-8")
    service = make_service(dummy_logger, console, FakeCommandRunner(), ScriptedPrompt())

    assert "already exists" in service.existing_key(make_context())


def test_generate_key_runs_keygen_and_agent(dummy_logger, console, make_context, home):
    def on_run(cmd):
        if cmd[0] == "ssh-keygen":
            key = home / ".ssh" / "id_ed25519"
            key.write_text("private", encoding="utf-8")
            key.with_name("id_ed25519.pub").write_text("ssh-ed25519 AAAA ada@example.com\n", encoding="utf-8")

    runner = FakeCommandRunner(results={("ssh-agent", "-s"): (0, AGENT_OUTPUT)}, on_run=on_run)
    prompt = ScriptedPrompt(default=True, answers={"Email label for SSH key": "ada@example.com"})
    service = make_service(dummy_logger, console, runner, prompt)
    ctx = make_context()

    assert service.generate_key(ctx) is StepStatus.DONE

    key_path = str(home / ".ssh" / "id_ed25519")
    assert ["ssh-keygen", "-t", "ed25519", "-C", "ada@example.com", "-f", key_path] in runner.calls
    assert ["ssh-add", key_path] in runner.calls
    assert ctx.env["SSH_AUTH_SOCK"] == "/tmp/ssh-abc/agent.42"
    assert ctx.env["SSH_AGENT_PID"] == "43"
    assert "ssh-ed25519 AAAA ada@example.com" in console.export_text()


def test_agent_failure_is_not_fatal(dummy_logger, console, make_context):
    runner = FakeCommandRunner(results={("ssh-agent",): (1, "")})
    prompt = ScriptedPrompt(default=True, answers={"Email label for SSH key": "ada@example.com"})
    service = make_service(dummy_logger, console, runner, prompt)

    assert service.generate_key(make_context()) is StepStatus.DONE
    assert not runner.ran("ssh-add")
    assert "Could not start ssh-agent" in console.export_text()


def test_generate_key_tightens_existing_ssh_dir(dummy_logger, console, make_context, home):
    ssh_dir = home / ".ssh"
    ssh_dir.mkdir(mode=0o755)
    ssh_dir.chmod(0o755)
    prompt = ScriptedPrompt(default=True, answers={"Email label for SSH key": "ada@example.com"})
    service = make_service(dummy_logger, console, FakeCommandRunner(), prompt)

    service.generate_key(make_context())

    assert ssh_dir.stat().st_mode & 0o777 == 0o700
