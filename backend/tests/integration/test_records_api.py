"""API tests for the owner-scoped record endpoints."""

import pytest

from farmdesk.domain.entities import ChangeOperation

API = "/api/v1"


@pytest.mark.asyncio
async def test_create_then_list_newest_first(client, alice):
    for name in ("Wheat", "Rice"):
        response = await client.post(f"{API}/rest/crops", json={"name": name}, headers=alice)
        assert response.status_code == 201

    response = await client.get(f"{API}/rest/crops", headers=alice)

    assert response.status_code == 200
    records = response.json()
    assert [r["name"] for r in records] == ["Rice", "Wheat"]
    assert records[0]["user_id"] == "user-a"
    assert records[0]["status"] == "planned"
    assert {"id", "created_at", "updated_at"} <= records[0].keys()


@pytest.mark.asyncio
async def test_rows_are_invisible_to_other_users(client, alice, bob):
    created = (await client.post(f"{API}/rest/crops", json={"name": "Rice"}, headers=alice)).json()

    listed = await client.get(f"{API}/rest/crops", headers=bob)
    fetched = await client.get(f"{API}/rest/crops/{created['id']}", headers=bob)
    patched = await client.patch(
        f"{API}/rest/crops/{created['id']}", json={"status": "growing"}, headers=bob
    )

    assert listed.json() == []
    assert fetched.status_code == 404
    assert patched.status_code == 404


@pytest.mark.asyncio
async def test_owner_cannot_be_spoofed(client, alice):
    response = await client.post(
        f"{API}/rest/parcels",
        json={"name": "North", "area": 2.5, "soil_type": "loam", "user_id": "user-b"},
        headers=alice,
    )

    assert response.status_code == 201
    assert response.json()["user_id"] == "user-a"


@pytest.mark.asyncio
async def test_missing_required_field_is_422(client, alice):
    response = await client.post(f"{API}/rest/parcels", json={"name": "North"}, headers=alice)

    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)


@pytest.mark.asyncio
async def test_filters_by_query_params(client, alice):
    await client.post(f"{API}/rest/crops", json={"name": "Rice", "status": "growing"}, headers=alice)
    await client.post(f"{API}/rest/crops", json={"name": "Wheat"}, headers=alice)

    response = await client.get(f"{API}/rest/crops", params={"status": "growing"}, headers=alice)

    assert [r["name"] for r in response.json()] == ["Rice"]


@pytest.mark.asyncio
async def test_update_then_delete(client, alice):
    created = (await client.post(f"{API}/rest/crops", json={"name": "Rice"}, headers=alice)).json()

    patched = await client.patch(
        f"{API}/rest/crops/{created['id']}", json={"status": "growing"}, headers=alice
    )
    assert patched.status_code == 200
    assert patched.json()["status"] == "growing"
    assert patched.json()["name"] == "Rice"

    first = await client.delete(f"{API}/rest/crops/{created['id']}", headers=alice)
    second = await client.delete(f"{API}/rest/crops/{created['id']}", headers=alice)
    assert first.status_code == 204
    assert second.status_code == 204
    assert (await client.get(f"{API}/rest/crops", headers=alice)).json() == []


@pytest.mark.asyncio
async def test_crop_writes_refresh_analytics(client, alice):
    await client.post(
        f"{API}/rest/crops", json={"name": "Rice", "area_planted": 2.0, "status": "growing"}, headers=alice
    )
    await client.post(f"{API}/rest/crops", json={"name": "Wheat", "area_planted": 1.5}, headers=alice)

    snapshots = (await client.get(f"{API}/rest/crop_analytics", headers=alice)).json()

    assert len(snapshots) == 1
    assert snapshots[0]["total_crops"] == 2
    assert snapshots[0]["total_area"] == 3.5


@pytest.mark.asyncio
async def test_analytics_cannot_be_deleted(client, alice):
    response = await client.delete(f"{API}/rest/crop_analytics/any-id", headers=alice)
    assert response.status_code == 405


@pytest.mark.asyncio
async def test_unknown_resource_is_404(client, alice):
    response = await client.get(f"{API}/rest/harvest_moons", headers=alice)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_writes_publish_change_events(client, alice, hub):
    seen = []
    original = hub.publish

    async def recording_publish(event):
        seen.append(event)
        await original(event)

    hub.publish = recording_publish
    created = (await client.post(f"{API}/rest/inventory", json={
        "name": "Urea", "category": "fertilizer", "unit": "kg",
    }, headers=alice)).json()
    await client.delete(f"{API}/rest/inventory/{created['id']}", headers=alice)

    assert [(e.table, e.operation) for e in seen] == [
        ("inventory", ChangeOperation.INSERT),
        ("inventory", ChangeOperation.DELETE),
    ]
    assert all(e.user_id == "user-a" for e in seen)


@pytest.mark.asyncio
async def test_profile_settings_round_trip(client, alice):
    profile = await client.put(f"{API}/profile", json={"farm_name": "Green Acres"}, headers=alice)
    assert profile.status_code == 200
    assert profile.json()["farm_name"] == "Green Acres"

    updated = await client.put(
        f"{API}/profile/settings", json={"notifications": {"email": False}}, headers=alice
    )
    assert updated.status_code == 200
    assert updated.json()["notifications"]["email"] is False


@pytest.mark.asyncio
async def test_attachment_upload_download_delete(client, alice, bob):
    crop = (await client.post(f"{API}/rest/crops", json={"name": "Rice"}, headers=alice)).json()

    uploaded = await client.post(
        f"{API}/attachments",
        files={"file": ("leaf.txt", b"brown spots", "text/plain")},
        data={"crop_id": crop["id"], "description": "Leaf sample"},
        headers=alice,
    )
    assert uploaded.status_code == 201
    attachment = uploaded.json()
    assert attachment["file_name"] == "leaf.txt"

    content = await client.get(f"{API}/attachments/{attachment['id']}/content", headers=alice)
    assert content.status_code == 200
    assert content.content == b"brown spots"

    foreign = await client.get(f"{API}/attachments/{attachment['id']}/content", headers=bob)
    assert foreign.status_code == 404

    deleted = await client.delete(f"{API}/attachments/{attachment['id']}", headers=alice)
    assert deleted.status_code == 204
    gone = await client.get(f"{API}/attachments/{attachment['id']}/content", headers=alice)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_attachment_storage_key_cannot_be_forged(client, alice, bob):
    secret = await client.post(
        f"{API}/attachments",
        files={"file": ("secret.txt", b"BOB-SECRET", "text/plain")},
        headers=bob,
    )
    bob_path = secret.json()["file_path"]
    forged_path = f"user-a/../{bob_path}"

    inserted = await client.post(
        f"{API}/rest/crop_attachments",
        json={"file_name": "secret.txt", "file_type": "text/plain", "file_path": forged_path},
        headers=alice,
    )
    assert inserted.status_code == 422

    own = await client.post(
        f"{API}/attachments",
        files={"file": ("mine.txt", b"mine", "text/plain")},
        headers=alice,
    )
    patched = await client.patch(
        f"{API}/rest/crop_attachments/{own.json()['id']}",
        json={"file_path": forged_path},
        headers=alice,
    )
    assert patched.status_code == 422

    content = await client.get(f"{API}/attachments/{own.json()['id']}/content", headers=alice)
    assert content.content == b"mine"


@pytest.mark.asyncio
async def test_email_user_ids_can_manage_their_attachments(client, headers_for):
    farmer = headers_for("alice@farm.in")

    uploaded = await client.post(
        f"{API}/attachments", files={"file": ("a.txt", b"a", "text/plain")}, headers=farmer
    )
    attachment_id = uploaded.json()["id"]

    content = await client.get(f"{API}/attachments/{attachment_id}/content", headers=farmer)
    assert content.status_code == 200
    assert content.content == b"a"

    assert (await client.delete(f"{API}/attachments/{attachment_id}", headers=farmer)).status_code == 204
