import pytest
from rich.console import Console

from macdevsetup.errors import SetupError
from macdevsetup.services.download import DownloadService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None


class FakeResponse:
    def __init__(self, payload: bytes):
        self.payload = payload
        self.headers = {"Content-Length": str(len(payload))}

    def raise_for_status(self):
        return None

    def iter_content(self, chunk_size=8192):
        yield self.payload

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeRequestsModule:
    class RequestException(Exception):
        pass

    def __init__(self, payload: bytes = b"", error=None):
        self.payload = payload
        self.error = error
        self.urls = []

    def get(self, url, *_args, **_kwargs):
        self.urls.append(url)
        if self.error:
            raise self.RequestException(self.error)
        return FakeResponse(self.payload)


def make_service(requests_module):
    return DownloadService(
        logger=DummyLogger(),
        console=Console(record=True),
        requests_module=requests_module,
    )


def test_fetch_script_writes_installer(tmp_path):
    requests_module = FakeRequestsModule(payload=b"#!/bin/bash\necho hi\n")

    path = make_service(requests_module).fetch_script(
        "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh",
        str(tmp_path),
        "Homebrew",
    )

    assert path == str(tmp_path / "install.sh")
    assert (tmp_path / "install.sh").read_bytes() == b"#!/bin/bash\necho hi\n"


def test_fetch_script_names_file_when_url_has_no_path(tmp_path):
    path = make_service(FakeRequestsModule(payload=b"x")).fetch_script(
        "https://install.python-poetry.org",
        str(tmp_path),
        "Poetry",
    )

    assert path == str(tmp_path / "install.sh")


def test_fetch_script_rejects_plain_http(tmp_path):
    requests_module = FakeRequestsModule(payload=b"unused")

    with pytest.raises(SetupError, match="non-HTTPS"):
        make_service(requests_module).fetch_script("http://example.com/install.sh", str(tmp_path), "nvm")

    assert requests_module.urls == []


def test_fetch_script_wraps_request_errors(tmp_path):
    requests_module = FakeRequestsModule(error="connection reset")

    with pytest.raises(SetupError, match="Download failed for nvm: connection reset"):
        make_service(requests_module).fetch_script("https://example.com/install.sh", str(tmp_path), "nvm")
