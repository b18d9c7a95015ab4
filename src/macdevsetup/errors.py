"""Domain errors for macdevsetup."""


class SetupError(RuntimeError):
    """Raised when a setup step cannot continue safely."""
