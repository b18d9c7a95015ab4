"""Configuration loader for macdevsetup."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from packaging.version import InvalidVersion, Version

from macdevsetup.errors import SetupError
from macdevsetup.models import DockerRuntime, SetupSettings


class ConfigLoader:
    """Loads YAML configuration files for run defaults."""

    SUPPORTED_KEYS = {
        "docker",
        "verbose",
        "log_file",
        "profile_file",
        "python_version",
        "nvm_version",
        "core_packages",
        "database_formulae",
        "workspace_root",
        "workspace_dirs",
    }
    LIST_KEYS = ("core_packages", "database_formulae", "workspace_dirs")
    SETTINGS_KEYS = (
        "profile_file",
        "python_version",
        "nvm_version",
        "core_packages",
        "database_formulae",
        "workspace_root",
        "workspace_dirs",
    )

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise SetupError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise SetupError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise SetupError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise SetupError(f"Unknown configuration keys: {unknown_list}")

        self._validate(parsed)
        return parsed

    def _validate(self, parsed: Dict[str, Any]):
        docker = parsed.get("docker")
        if docker is not None and docker not in DockerRuntime.values():
            allowed = "|".join(DockerRuntime.values())
            raise SetupError(f"Config key 'docker' must be one of: {allowed}")

        python_version = parsed.get("python_version")
        if python_version is not None:
            try:
                Version(str(python_version))
            except InvalidVersion as exc:
                raise SetupError(
                    f"Config key 'python_version' is not a valid version: {python_version}"
                ) from exc

        for key in self.LIST_KEYS:
            value = parsed.get(key)
            if value is None:
                continue
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise SetupError(f"Config key '{key}' must be a list of strings.")

    def build_settings(self, config: Dict[str, Any]) -> SetupSettings:
        values = {}
        for key in self.SETTINGS_KEYS:
            if key not in config:
                continue
            value = config[key]
            values[key] = tuple(value) if key in self.LIST_KEYS else str(value)
        return SetupSettings(**values)
