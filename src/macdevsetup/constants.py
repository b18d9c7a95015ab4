"""Installer locations and defaults for macdevsetup."""

BREW_CANDIDATES = ("/opt/homebrew/bin/brew", "/usr/local/bin/brew")
APPLE_SILICON_BREW = "/opt/homebrew/bin/brew"
INTEL_BREW = "/usr/local/bin/brew"

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
NVM_INSTALL_URL = "https://raw.githubusercontent.com/nvm-sh/nvm/{version}/install.sh"
POETRY_INSTALL_URL = "https://install.python-poetry.org"
OH_MY_ZSH_INSTALL_URL = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"

DEFAULT_PROFILE_FILE = "~/.zprofile"
DEFAULT_PYTHON_VERSION = "3.12.8"
DEFAULT_NVM_VERSION = "v0.39.7"
DEFAULT_CORE_PACKAGES = (
    "git",
    "curl",
    "wget",
    "jq",
    "openssl",
    "readline",
    "sqlite",
    "gnu-sed",
    "coreutils",
    "ca-certificates",
    "ripgrep",
    "fd",
    "fzf",
    "tmux",
    "tree",
    "watch",
    "htop",
    "direnv",
    "shellcheck",
)
DEFAULT_DATABASE_FORMULAE = ("postgresql@16", "redis")
DEFAULT_WORKSPACE_ROOT = "~/dev"
DEFAULT_WORKSPACE_DIRS = ("frontend", "backend", "scripts")

PYENV_PROFILE_LINES = (
    'export PYENV_ROOT="$HOME/.pyenv"',
    'command -v pyenv >/dev/null || export PATH="$PYENV_ROOT/bin:$PATH"',
    'eval "$(pyenv init -)"',
)
LOCAL_BIN_PROFILE_LINE = 'export PATH="$HOME/.local/bin:$PATH"'

SSH_DIR_MODE = 0o700
