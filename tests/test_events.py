from viewer_settings.core.events import Event, EventBus, EventType, SettingsEventData


def test_publish_reaches_subscribers_of_the_type():
    bus = EventBus()
    saved, failed = [], []
    bus.subscribe(EventType.SETTINGS_SAVED, saved.append)
    bus.subscribe(EventType.AUTOSAVE_FAILED, failed.append)

    event = Event(EventType.SETTINGS_SAVED, SettingsEventData("gs://bucket/key.json"))
    bus.publish(event)

    assert saved == [event]
    assert failed == []


def test_duplicate_subscription_delivers_once():
    bus = EventBus()
    seen = []
    bus.subscribe(EventType.SETTINGS_LOADED, seen.append)
    bus.subscribe(EventType.SETTINGS_LOADED, seen.append)

    bus.publish(Event(EventType.SETTINGS_LOADED))

    assert len(seen) == 1


def test_failing_subscriber_does_not_block_others():
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("handler bug")

    bus.subscribe(EventType.SETTINGS_SAVED, broken)
    bus.subscribe(EventType.SETTINGS_SAVED, seen.append)

    bus.publish(Event(EventType.SETTINGS_SAVED))

    assert len(seen) == 1


def test_unsubscribe():
    bus = EventBus()
    seen = []
    bus.subscribe(EventType.SETTINGS_SAVED, seen.append)

    bus.unsubscribe(EventType.SETTINGS_SAVED, seen.append)
    bus.unsubscribe(EventType.SETTINGS_SAVED, seen.append)
    bus.unsubscribe(EventType.AUTOSAVE_FAILED, seen.append)
    bus.publish(Event(EventType.SETTINGS_SAVED))

    assert seen == []
