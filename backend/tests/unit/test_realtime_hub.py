"""Unit tests for the per-user realtime change hub."""

import asyncio
import json

import pytest

from farmdesk.application.services import RealtimeHub
from farmdesk.domain.entities import ChangeEvent, ChangeOperation


def _payload(frame: str) -> dict:
    data_line = next(line for line in frame.splitlines() if line.startswith("data: "))
    return json.loads(data_line[len("data: "):])


@pytest.mark.asyncio
async def test_subscriber_receives_ready_then_own_changes():
    hub = RealtimeHub()
    stream = hub.subscribe("user-a")

    ready = await anext(stream)
    assert ready.startswith("event: ready")
    assert hub.subscriber_count("user-a") == 1

    await hub.publish(ChangeEvent("crops", ChangeOperation.INSERT, "user-a", "c1"))
    frame = await anext(stream)

    assert frame.startswith("event: change")
    assert frame.endswith("\n\n")
    payload = _payload(frame)
    assert payload["table"] == "crops"
    assert payload["operation"] == "INSERT"
    assert payload["record_id"] == "c1"

    await stream.aclose()
    assert hub.subscriber_count("user-a") == 0


@pytest.mark.asyncio
async def test_publish_only_reaches_the_owner():
    hub = RealtimeHub()
    stream_a = hub.subscribe("user-a")
    stream_b = hub.subscribe("user-b")
    await anext(stream_a)
    await anext(stream_b)

    await hub.publish(ChangeEvent("parcels", ChangeOperation.DELETE, "user-b", "p1"))

    frame_b = await anext(stream_b)
    assert _payload(frame_b)["user_id"] == "user-b"

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(anext(stream_a), timeout=0.05)

    await stream_b.aclose()


@pytest.mark.asyncio
async def test_shutdown_ends_every_stream():
    hub = RealtimeHub()
    stream = hub.subscribe("user-a")
    await anext(stream)

    await hub.shutdown()

    with pytest.raises(StopAsyncIteration):
        await anext(stream)


@pytest.mark.asyncio
async def test_slow_subscriber_is_disconnected_when_queue_fills():
    hub = RealtimeHub(queue_size=2)
    stream = hub.subscribe("user-a")
    await anext(stream)

    for i in range(5):
        await hub.publish(ChangeEvent("crops", ChangeOperation.UPDATE, "user-a", f"c{i}"))

    assert hub.subscriber_count("user-a") == 0
    with pytest.raises(StopAsyncIteration):
        await anext(stream)
