from veo_studio.core import ensure_directory, remove_file


def test_ensure_directory_creates_nested(tmp_path):
    target = tmp_path / "a" / "b"
    assert ensure_directory(target) == target
    assert target.is_dir()


def test_remove_file(tmp_path):
    stored = tmp_path / "video.mp4"
    stored.write_bytes(b"mp4")

    assert remove_file(stored) is True
    assert not stored.exists()
    assert remove_file(stored) is False


def test_remove_file_without_path():
    assert remove_file(None) is False
