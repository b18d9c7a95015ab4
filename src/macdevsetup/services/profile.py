"""Idempotent shell profile mutation."""

from pathlib import Path


class ProfileService:
    """Appends configuration lines to login-shell profile files."""

    def __init__(self, logger):
        self.logger = logger

    def append_if_missing(self, line: str, path: Path) -> bool:
        """Append ``line`` unless the file already contains it verbatim.

        The comparison is done on bytes, so profiles holding text in another
        encoding are left intact. Returns ``True`` when the file was changed.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)

        content = path.read_bytes()
        encoded = line.encode("utf-8")
        if encoded in content:
            self.logger.debug("Profile %s already contains: %s", path, line)
            return False

        with open(path, "ab") as file_obj:
            if content and not content.endswith(b"\n"):
                file_obj.write(b"\n")
            file_obj.write(encoded + b"\n")

        self.logger.info("Added to %s: %s", path, line)
        return True
