import logging
import os

import click
from rich.logging import RichHandler

from .core import WorkstationSetup
from .errors import SetupError
from .models import DockerRuntime
from .services.config_loader import ConfigLoader

DEFAULT_CONFIG_NAME = ".macdevsetup.yml"
CONFIG_ENV_VAR = "MACDEVSETUP_CONFIG"


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


def _find_config():
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return explicit
    default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_NAME)
    if os.path.exists(default_config_path):
        return default_config_path
    return None


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


class SetupCommand(click.Command):
    """Reports every usage error, including bad ``--docker`` values, with exit status 1."""

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise


@click.command(cls=SetupCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--docker",
    "docker",
    required=False,
    type=click.Choice(DockerRuntime.values()),
    help="Pre-select the Docker runtime instead of being asked.",
)
def main(docker):
    """Interactively install macOS dev tooling, prompting before each step."""
    logger = logging.getLogger("macdevsetup")

    try:
        config_loader = ConfigLoader()
        config_values = config_loader.load(_find_config())
        settings = config_loader.build_settings(config_values)
    except SetupError as exc:
        raise click.ClickException(str(exc)) from exc

    docker = _resolve_option(docker, config_values, "docker")
    verbose = bool(config_values.get("verbose", False))
    log_file = config_values.get("log_file")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(os.path.expanduser(log_file))
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    setup = WorkstationSetup(
        docker_runtime=DockerRuntime(docker) if docker else None,
        settings=settings,
    )
    raise SystemExit(setup.run())


if __name__ == "__main__":
    main()
