"""Unit tests for ResourceView."""

import asyncio

import pytest

from farmdesk.client import ResourceStore, ResourceView, Session
from farmdesk.domain.entities import ResourceName
from farmdesk.domain.exceptions import TransportError


@pytest.fixture
def store(fake_remote, session_context) -> ResourceStore:
    return ResourceStore(ResourceName.PARCELS, fake_remote, session_context)


@pytest.mark.asyncio
async def test_view_tracks_store(store, session_context):
    view = ResourceView(store)
    await session_context.sign_in(Session("user-a", "token-a"))

    created = await view.create({"name": "North field", "area": 2.5})

    assert view.records == (created,)
    assert view.is_loading is False


@pytest.mark.asyncio
async def test_closed_view_keeps_its_last_snapshot(store, session_context):
    view = ResourceView(store)
    await session_context.sign_in(Session("user-a", "token-a"))
    await store.create({"name": "North field"})
    snapshot = view.records

    view.close()
    await store.create({"name": "South field"})

    assert view.records == snapshot
    assert len(store.records) == 2


@pytest.mark.asyncio
async def test_mutation_on_closed_view_raises(store):
    view = ResourceView(store)
    view.close()

    with pytest.raises(RuntimeError):
        await view.create({"name": "North field"})


@pytest.mark.asyncio
async def test_result_arriving_after_close_is_dropped(store, fake_remote, session_context):
    view = ResourceView(store)
    await session_context.sign_in(Session("user-a", "token-a"))
    fake_remote.gates["insert"] = asyncio.Event()

    task = asyncio.create_task(view.create({"name": "North field"}))
    await asyncio.sleep(0)
    view.close()
    fake_remote.gates["insert"].set()

    assert await task is None
    assert len(store.records) == 1


@pytest.mark.asyncio
async def test_failure_arriving_after_close_is_dropped(store, fake_remote, session_context):
    view = ResourceView(store)
    await session_context.sign_in(Session("user-a", "token-a"))
    fake_remote.gates["remove"] = asyncio.Event()
    fake_remote.failures["remove"] = TransportError("Backend unreachable")

    task = asyncio.create_task(view.delete("p1"))
    await asyncio.sleep(0)
    view.close()
    fake_remote.gates["remove"].set()

    assert await task is None


@pytest.mark.asyncio
async def test_failure_on_open_view_propagates(store, fake_remote, session_context):
    view = ResourceView(store)
    await session_context.sign_in(Session("user-a", "token-a"))
    fake_remote.failures["update"] = TransportError("Backend unreachable")

    with pytest.raises(TransportError):
        await view.update("p1", {"area": 3})
    assert view.is_pending("p1") is False
