"""Actionable error catalog for macdevsetup."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "unsupported_platform": {
        "what": "This script is for macOS only (detected {system}).",
        "next": "Run it on a Mac as your normal user.",
    },
    "brew_missing_after_install": {
        "what": "Homebrew install completed but brew not found in expected locations.",
        "next": "Open a new terminal, check `/opt/homebrew/bin` or `/usr/local/bin`, then re-run.",
    },
    "command_not_found": {
        "what": "Required command not found: {command}.",
        "next": "Install it (or open a new terminal so PATH is refreshed) and re-run.",
    },
    "installer_failed": {
        "what": "{description} failed ({returncode}).",
        "next": "Fix the reported problem and re-run; completed steps are detected and skipped.",
    },
    "download_failed": {
        "what": "Download failed for {description}: {reason}",
        "next": "Check your network connection and re-run.",
    },
    "insecure_url": {
        "what": "{description} uses a non-HTTPS URL: {url}",
        "next": "Use the official HTTPS installer URL.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
