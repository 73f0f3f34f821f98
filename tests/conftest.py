"""Shared fakes for the persistence tests."""

import json
from pathlib import Path

import pytest

from viewer_settings.core.events import EventBus
from viewer_settings.persistence.manager import SettingsPersistenceManager
from viewer_settings.storage.base import SettingsLocator, StorageBackend
from viewer_settings.viewer.state import JsonViewerStateStore, ViewerState

LOCATOR = SettingsLocator.parse("gs://shared-bucket/dataset.n5/viewer-settings.json")


class MemoryBackend(StorageBackend):
    """In-memory backend with injectable failures."""

    def __init__(self, documents=None):
        self.documents = dict(documents or {})
        self.uploads: list[bytes] = []
        self.exists_error = None
        self.download_error = None
        self.upload_error = None

    @property
    def name(self) -> str:
        return "Memory"

    def exists(self, locator):
        if self.exists_error:
            raise self.exists_error
        return locator.key in self.documents

    def download_to(self, locator, local_path):
        if self.download_error:
            raise self.download_error
        Path(local_path).write_bytes(self.documents[locator.key])

    def upload(self, locator, data):
        if self.upload_error:
            raise self.upload_error
        self.uploads.append(data)
        self.documents[locator.key] = data


class RecordingTimer:
    """Timer stand-in that only fires when told to."""

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.callback()


class RecordingPrompt:
    """Confirm prompt returning a fixed answer and remembering the questions."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.messages: list[str] = []

    def __call__(self, message: str) -> bool:
        self.messages.append(message)
        return self.answer


def settings_document(state: ViewerState) -> bytes:
    return json.dumps(state.to_dict()).encode("utf-8")


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def timers():
    created: list[RecordingTimer] = []

    def factory(interval, callback):
        timer = RecordingTimer(interval, callback)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def prompt():
    return RecordingPrompt(answer=True)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def staging_dir(tmp_path):
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def viewer_state():
    return JsonViewerStateStore()


@pytest.fixture
def make_manager(backend, viewer_state, prompt, event_bus, timers, staging_dir):
    def make(**overrides):
        kwargs = dict(
            backend=backend,
            locator=LOCATOR,
            viewer_state=viewer_state,
            confirm=prompt,
            event_bus=event_bus,
            autosave_interval=60,
            timer_factory=timers,
            staging_dir=staging_dir,
        )
        kwargs.update(overrides)
        return SettingsPersistenceManager(**kwargs)

    return make
