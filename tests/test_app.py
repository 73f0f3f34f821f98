import pytest

pytest.importorskip("customtkinter")

from viewer_settings.app import ViewerSettingsApp, parse_args


class RecordingWindow:
    """Runs scheduled callbacks immediately and keeps the status text."""

    def __init__(self):
        self.statuses = []
        self.results = []

    def after(self, delay, callback):
        callback()

    def set_status(self, message):
        self.statuses.append(message)

    def set_result(self, result):
        self.results.append(result)


def _headless_app(manager, readonly=False):
    app = ViewerSettingsApp.__new__(ViewerSettingsApp)
    app.manager = manager
    app.window = RecordingWindow()
    app._readonly = readonly
    app._initializing = True
    app._closing = False
    return app


def test_unwritable_staging_dir_is_reported(make_manager, tmp_path):
    manager = make_manager(staging_dir=tmp_path / "missing")
    app = _headless_app(manager)

    app._initialize_manager()

    assert not app._initializing
    assert len(app.window.statuses) == 1
    assert app.window.results == []


def test_successful_open_shows_the_result(make_manager):
    manager = make_manager()
    app = _headless_app(manager, readonly=True)

    app._initialize_manager()

    assert [r.value for r in app.window.results] == ["not_loaded_read_only"]


def test_parse_args():
    args = parse_args(["gs://bucket/data.n5", "--dataset", "--read-only"])

    assert args.locator == "gs://bucket/data.n5"
    assert args.dataset
    assert args.readonly is True
    assert parse_args([]).readonly is None


def test_module_entry_point_runs_the_app():
    from viewer_settings import __main__ as entry
    from viewer_settings import app

    assert entry.main is app.main
