import asyncio
import logging

import pytest

from engine.style_map import StyleMap
from engine.types import CLICK, LngLat, MapMouseEvent
from interaction.click import ClickRecorder
from fakes import GatedStyleLoader


def _map() -> StyleMap:
    # Clicks don't depend on style readiness, so the style is never released.
    return StyleMap(
        container="map",
        style_loader=GatedStyleLoader(asyncio.Event()),
        center=(51.402, 35.725),
        zoom=13,
    )


def test_click_records_exact_coordinate(caplog):
    caplog.set_level(logging.INFO, logger="interaction.click")

    async def scenario():
        instance = _map()
        recorder = ClickRecorder().attach(instance)
        instance.fire(CLICK, MapMouseEvent(lng_lat=LngLat(lng=51.402, lat=35.725)))
        instance.remove()
        return recorder.clicks

    assert asyncio.run(scenario()) == [LngLat(lng=51.402, lat=35.725)]
    assert "lng=51.402 lat=35.725" in caplog.text


def test_detach_removes_listener_from_the_same_instance():
    async def scenario():
        instance = _map()
        with ClickRecorder().attach(instance) as recorder:
            instance.fire(CLICK, MapMouseEvent(lng_lat=LngLat(1.0, 2.0)))
            assert instance.listener_count(CLICK) == 1
        instance.fire(CLICK, MapMouseEvent(lng_lat=LngLat(3.0, 4.0)))
        count = instance.listener_count(CLICK)
        instance.remove()
        return recorder, count

    recorder, count = asyncio.run(scenario())
    assert count == 0
    assert recorder.clicks == [LngLat(1.0, 2.0)]
    assert recorder.attached is False


def test_detach_happens_on_error_exit():
    async def scenario():
        instance = _map()
        with pytest.raises(RuntimeError, match="boom"):
            with ClickRecorder().attach(instance):
                raise RuntimeError("boom")
        count = instance.listener_count(CLICK)
        instance.remove()
        return count

    assert asyncio.run(scenario()) == 0


def test_attach_twice_is_rejected_and_detach_twice_is_harmless():
    async def scenario():
        instance = _map()
        recorder = ClickRecorder().attach(instance)
        with pytest.raises(RuntimeError):
            recorder.attach(instance)
        recorder.detach()
        recorder.detach()
        instance.remove()

    asyncio.run(scenario())


def test_recorder_keeps_only_latest_events():
    async def scenario():
        instance = _map()
        recorder = ClickRecorder(max_events=2).attach(instance)
        for i in range(3):
            instance.fire(CLICK, MapMouseEvent(lng_lat=LngLat(float(i), 0.0)))
        instance.remove()
        return recorder.clicks

    assert asyncio.run(scenario()) == [LngLat(1.0, 0.0), LngLat(2.0, 0.0)]
