from macdevsetup.services.profile import ProfileService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None


LINE = 'eval "$(/opt/homebrew/bin/brew shellenv)"'


def test_append_twice_leaves_single_occurrence(tmp_path):
    profile = tmp_path / ".zprofile"
    service = ProfileService(logger=DummyLogger())

    assert service.append_if_missing(LINE, profile) is True
    assert service.append_if_missing(LINE, profile) is False

    assert profile.read_text(encoding="utf-8").count(LINE) == 1


def test_append_creates_missing_file_and_parent(tmp_path):
    profile = tmp_path / "nested" / ".zprofile"

    ProfileService(logger=DummyLogger()).append_if_missing(LINE, profile)

    assert profile.read_text(encoding="utf-8") == f"{LINE}\n"


def test_append_keeps_existing_content_on_its_own_line(tmp_path):
    profile = tmp_path / ".zprofile"
    profile.write_text("export EDITOR=vim", encoding="utf-8")

    ProfileService(logger=DummyLogger()).append_if_missing(LINE, profile)

    assert profile.read_text(encoding="utf-8") == f"export EDITOR=vim\n{LINE}\n"


def test_existing_line_is_matched_verbatim(tmp_path):
    profile = tmp_path / ".zprofile"
    profile.write_text(f"# managed\n  {LINE}  # trailing comment\n", encoding="utf-8")
    service = ProfileService(logger=DummyLogger())

    assert service.append_if_missing(LINE, profile) is False
    assert service.append_if_missing('eval "$(/usr/local/bin/brew shellenv)"', profile) is True


def test_profile_with_non_utf8_bytes_is_appended_without_loss(tmp_path):
    profile = tmp_path / ".zprofile"
    profile.write_bytes(b"export X=\xff\n")
    service = ProfileService(logger=DummyLogger())

    assert service.append_if_missing("export Y=1", profile) is True
    assert service.append_if_missing("export Y=1", profile) is False

    assert profile.read_bytes() == b"export X=\xff\nexport Y=1\n"
