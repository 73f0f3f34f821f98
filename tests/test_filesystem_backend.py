from pathlib import Path

import pytest

from viewer_settings.storage.base import PermissionDeniedError, SettingsLocator, TransportError
from viewer_settings.storage.filesystem import LocalFileBackend


@pytest.fixture
def backend(tmp_path):
    return LocalFileBackend(root=tmp_path)


def test_upload_creates_parents_and_replaces(backend, tmp_path):
    locator = SettingsLocator.parse("nested/dir/settings.json")

    backend.upload(locator, b"first")
    backend.upload(locator, b"second")

    target = tmp_path / "nested" / "dir" / "settings.json"
    assert target.read_bytes() == b"second"
    assert [p.name for p in target.parent.iterdir()] == ["settings.json"]


def test_exists_and_download(backend, tmp_path):
    locator = SettingsLocator.parse("settings.json")
    assert not backend.exists(locator)

    (tmp_path / "settings.json").write_bytes(b"{}")
    assert backend.exists(locator)

    destination = tmp_path / "copy.json"
    backend.download_to(locator, destination)
    assert destination.read_bytes() == b"{}"


def test_directory_does_not_count_as_document(backend, tmp_path):
    (tmp_path / "folder.json").mkdir()

    assert not backend.exists(SettingsLocator.parse("folder.json"))


def test_absolute_locator_ignores_root(tmp_path):
    other = tmp_path / "elsewhere"
    other.mkdir()
    backend = LocalFileBackend(root=tmp_path / "root")
    locator = SettingsLocator.parse(str(other / "settings.json"))

    assert backend.resolve(locator) == other / "settings.json"


def test_download_missing_file_is_transport_error(backend, tmp_path):
    with pytest.raises(TransportError):
        backend.download_to(SettingsLocator.parse("missing.json"), tmp_path / "out.json")


def test_permission_error_is_mapped(backend, tmp_path, monkeypatch):
    def refuse(self, data):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "write_bytes", refuse)

    with pytest.raises(PermissionDeniedError):
        backend.upload(SettingsLocator.parse("settings.json"), b"{}")
    assert list(tmp_path.iterdir()) == []


def test_other_os_error_is_transport_error(backend, tmp_path, monkeypatch):
    def full(self, data):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(Path, "write_bytes", full)

    with pytest.raises(TransportError):
        backend.upload(SettingsLocator.parse("settings.json"), b"{}")


def test_rejects_object_store_locators(backend):
    with pytest.raises(ValueError):
        backend.exists(SettingsLocator.parse("gs://bucket/settings.json"))
