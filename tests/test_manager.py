import json

import pytest

from viewer_settings.core.events import EventType
from viewer_settings.persistence.manager import (
    READ_ONLY_PROMPT,
    AlreadyInitializedError,
    InitResult,
    ManagerState,
    always,
)
from viewer_settings.storage.base import PermissionDeniedError, TransportError
from viewer_settings.viewer.state import SerializeError, ViewerState, ViewerStateStore

from conftest import LOCATOR, settings_document


def _record(event_bus, *event_types):
    seen = []
    for event_type in event_types:
        event_bus.subscribe(event_type, seen.append)
    return seen


@pytest.mark.parametrize("present", [True, False])
@pytest.mark.parametrize("writable", [True, False])
@pytest.mark.parametrize("readonly", [True, False])
def test_initialize_result_table(make_manager, backend, prompt, timers, present, writable, readonly):
    if present:
        backend.documents[LOCATOR.key] = settings_document(ViewerState())
    if not writable:
        backend.upload_error = PermissionDeniedError("403 Forbidden")

    manager = make_manager()
    result = manager.initialize(readonly=readonly)

    can_save = writable and not readonly
    expected = {
        (True, True): InitResult.LOADED,
        (True, False): InitResult.LOADED_READ_ONLY,
        (False, True): InitResult.NOT_LOADED,
        (False, False): InitResult.NOT_LOADED_READ_ONLY,
    }[(present, can_save)]

    assert result is expected
    assert manager.result is expected
    assert manager.is_writable is can_save
    assert len(timers.created) == (1 if can_save else 0)
    assert manager.state is (ManagerState.ACTIVE if can_save else ManagerState.FINALIZED)
    # The prompt only appears when a real probe was refused
    assert prompt.messages == ([READ_ONLY_PROMPT] if not readonly and not writable else [])


def test_readonly_skips_the_probe(make_manager, backend):
    manager = make_manager()

    assert manager.initialize(readonly=True) is InitResult.NOT_LOADED_READ_ONLY
    assert backend.uploads == []


def test_probe_writes_the_current_state(make_manager, backend, viewer_state):
    viewer_state.add_bookmark("overview")

    make_manager().initialize()

    assert len(backend.uploads) == 1
    assert "overview" in json.loads(backend.uploads[0])["bookmarks"]


def test_armed_timer_uses_configured_interval(make_manager, timers):
    make_manager(autosave_interval=42).initialize()

    timer = timers.created[0]
    assert timer.started
    assert timer.interval == 42


def test_declined_prompt_cancels_without_timer(make_manager, backend, timers):
    backend.upload_error = PermissionDeniedError("403 Forbidden")
    manager = make_manager(confirm=always(False))

    assert manager.initialize() is InitResult.CANCELED
    assert manager.state is ManagerState.FINALIZED
    assert timers.created == []

    backend.upload_error = None
    manager.on_autosave_tick()
    manager.on_shutdown()
    assert backend.uploads == []


def test_accepted_prompt_continues_read_only(make_manager, backend, timers, event_bus):
    backend.documents[LOCATOR.key] = settings_document(ViewerState())
    backend.upload_error = PermissionDeniedError("403 Forbidden")
    seen = _record(event_bus, EventType.READ_ONLY_FALLBACK)
    manager = make_manager(confirm=always(True))

    result = manager.initialize()

    assert result is InitResult.LOADED_READ_ONLY
    assert result.is_read_only and result.is_loaded
    assert timers.created == []
    assert [e.type for e in seen] == [EventType.READ_ONLY_FALLBACK]
    assert isinstance(seen[0].data.error, PermissionDeniedError)


def test_transport_error_during_probe_is_fatal(make_manager, backend, prompt, timers):
    backend.upload_error = TransportError("503 Service Unavailable")
    manager = make_manager()

    with pytest.raises(TransportError):
        manager.initialize()

    assert prompt.messages == []
    assert timers.created == []
    assert manager.state is ManagerState.FINALIZED
    assert manager.result is None


def test_serialize_error_during_probe_is_fatal(make_manager, prompt):
    class BrokenState(ViewerStateStore):
        def load_from(self, path):
            pass

        def save_to(self, path):
            raise SerializeError("viewer is gone")

    manager = make_manager(viewer_state=BrokenState())

    with pytest.raises(SerializeError):
        manager.initialize()
    assert prompt.messages == []


def test_existence_check_failure_is_fatal(make_manager, backend):
    backend.exists_error = TransportError("connection reset")
    manager = make_manager()

    with pytest.raises(TransportError):
        manager.initialize()
    assert manager.state is ManagerState.FINALIZED


def test_initialize_twice_fails(make_manager):
    manager = make_manager()
    manager.initialize()

    with pytest.raises(AlreadyInitializedError):
        manager.initialize()
    assert manager.state is ManagerState.ACTIVE


def test_initialize_twice_fails_after_cancel(make_manager, backend):
    backend.upload_error = PermissionDeniedError("403 Forbidden")
    manager = make_manager(confirm=always(False))
    manager.initialize()

    with pytest.raises(AlreadyInitializedError):
        manager.initialize(readonly=True)


def test_initialize_twice_fails_after_fatal_error(make_manager, backend):
    backend.upload_error = TransportError("timeout")
    manager = make_manager()
    with pytest.raises(TransportError):
        manager.initialize()

    with pytest.raises(AlreadyInitializedError):
        manager.initialize()


def test_existing_settings_are_applied(make_manager, backend, viewer_state, event_bus):
    saved = ViewerState(bookmarks={"cell": (2.0,) + (0.0,) * 11}, current_timepoint=7)
    backend.documents[LOCATOR.key] = settings_document(saved)
    seen = _record(event_bus, EventType.SETTINGS_LOADED)

    assert make_manager().initialize(readonly=True) is InitResult.LOADED_READ_ONLY
    assert viewer_state.state == saved
    assert len(seen) == 1


def test_corrupt_settings_do_not_abort(make_manager, backend, viewer_state, event_bus, staging_dir):
    backend.documents[LOCATOR.key] = b"{not valid json"
    seen = _record(event_bus, EventType.SETTINGS_LOAD_FAILED)

    result = make_manager().initialize()

    assert result is InitResult.LOADED
    assert viewer_state.state == ViewerState()
    assert len(seen) == 1
    assert list(staging_dir.iterdir()) == []


def test_mistyped_display_settings_count_as_load_failure(make_manager, backend, viewer_state, event_bus):
    document = {"schema_version": 1, "display": {"c": {"min": "abc", "max": None}}}
    backend.documents[LOCATOR.key] = json.dumps(document).encode("utf-8")
    loaded = _record(event_bus, EventType.SETTINGS_LOADED)
    failed = _record(event_bus, EventType.SETTINGS_LOAD_FAILED)

    make_manager().initialize(readonly=True)

    assert loaded == []
    assert len(failed) == 1
    assert viewer_state.state.display == {}


def test_download_failure_does_not_abort(make_manager, backend, event_bus, staging_dir):
    backend.documents[LOCATOR.key] = settings_document(ViewerState())
    backend.download_error = TransportError("connection reset")
    seen = _record(event_bus, EventType.SETTINGS_LOAD_FAILED)

    assert make_manager().initialize(readonly=True) is InitResult.LOADED_READ_ONLY
    assert isinstance(seen[0].data.error, TransportError)
    assert list(staging_dir.iterdir()) == []


def test_autosave_tick_saves(make_manager, backend, timers, viewer_state):
    manager = make_manager()
    manager.initialize()
    viewer_state.update(current_timepoint=3)

    timers.created[0].fire()

    assert len(backend.uploads) == 2
    assert json.loads(backend.uploads[-1])["current_timepoint"] == 3


def test_autosave_tick_failure_is_reported(make_manager, backend, event_bus, staging_dir):
    manager = make_manager()
    manager.initialize()
    seen = _record(event_bus, EventType.AUTOSAVE_FAILED)

    backend.upload_error = TransportError("quota exceeded")
    manager.on_autosave_tick()

    assert [e.type for e in seen] == [EventType.AUTOSAVE_FAILED]
    assert manager.state is ManagerState.ACTIVE
    assert list(staging_dir.iterdir()) == []

    backend.upload_error = None
    manager.on_autosave_tick()
    assert len(backend.uploads) == 2


def test_autosave_tick_survives_unexpected_errors(make_manager, viewer_state, event_bus):
    manager = make_manager()
    manager.initialize()
    seen = _record(event_bus, EventType.AUTOSAVE_FAILED)

    def explode(path):
        raise RuntimeError("boom")

    viewer_state.save_to = explode
    manager.on_autosave_tick()

    assert len(seen) == 1


def test_serialize_failure_leaves_no_staged_document(make_manager, viewer_state, staging_dir):
    manager = make_manager()
    manager.initialize()

    def write_half_then_fail(path):
        path.write_text("{\"transform\":", encoding="utf-8")
        raise SerializeError("disk full")

    viewer_state.save_to = write_half_then_fail
    manager.on_autosave_tick()

    assert list(staging_dir.iterdir()) == []


def test_shutdown_before_initialize_is_noop(make_manager, backend):
    manager = make_manager()

    manager.on_shutdown()

    assert backend.uploads == []
    assert manager.state is ManagerState.UNINITIALIZED


def test_shutdown_read_only_is_noop(make_manager, backend):
    manager = make_manager()
    manager.initialize(readonly=True)

    manager.on_shutdown()

    assert backend.uploads == []
    assert manager.state is ManagerState.FINALIZED


def test_shutdown_saves_once_and_stops_autosave(make_manager, backend, timers):
    manager = make_manager()
    manager.initialize()
    timer = timers.created[0]
    assert len(backend.uploads) == 1

    manager.on_shutdown()

    assert len(backend.uploads) == 2
    assert timer.cancelled
    assert manager.state is ManagerState.FINALIZED

    timer.fire()
    manager.on_shutdown()
    assert len(backend.uploads) == 2


def test_shutdown_save_failure_is_reported(make_manager, backend, timers, event_bus):
    manager = make_manager()
    manager.initialize()
    seen = _record(event_bus, EventType.SHUTDOWN_SAVE_FAILED)

    backend.upload_error = PermissionDeniedError("403 Forbidden")
    manager.on_shutdown()

    assert len(seen) == 1
    assert timers.created[0].cancelled
    assert manager.state is ManagerState.FINALIZED


def test_successful_saves_are_published(make_manager, event_bus):
    seen = _record(event_bus, EventType.SETTINGS_SAVED)
    manager = make_manager()

    manager.initialize()
    manager.on_autosave_tick()
    manager.on_shutdown()

    assert len(seen) == 3
    assert all(e.data.locator == LOCATOR for e in seen)


def test_manager_without_event_bus(make_manager, backend):
    backend.upload_error = PermissionDeniedError("403 Forbidden")
    manager = make_manager(event_bus=None)

    assert manager.initialize() is InitResult.NOT_LOADED_READ_ONLY
