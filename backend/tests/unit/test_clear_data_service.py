"""Unit tests for the bulk data clear."""

import pytest

from farmdesk.application.services import ClearDataService
from farmdesk.domain.entities import CLEARABLE_TABLES, Profile, ResourceName


def _service(memory_db, **kwargs) -> ClearDataService:
    return ClearDataService(memory_db.repository_scope(), memory_db.profile_scope(), **kwargs)


@pytest.mark.asyncio
async def test_clear_reports_every_table_and_resets_profile(memory_db):
    memory_db.seed(ResourceName.CROPS, "user-a", name="Rice")
    memory_db.seed(ResourceName.CROPS, "user-a", name="Wheat")
    memory_db.seed(ResourceName.PARCELS, "user-a", name="North", area=2, soil_type="loam")
    memory_db.seed(ResourceName.NOTIFICATIONS, "user-a", title="t", message="m", type="info")
    memory_db.seed(ResourceName.CROPS, "user-b", name="Millet")
    memory_db.profiles["user-a"] = Profile(
        id="user-a", full_name="Asha Patil", farm_name="Green Acres", preferences={"theme": "dark"}
    )

    report = await _service(memory_db).clear("user-a")

    assert len(report.results) == len(CLEARABLE_TABLES) + 1
    assert report.success_count == 11
    assert report.error_count == 0
    assert [r.table for r in report.results[:10]] == [t.value for t in CLEARABLE_TABLES]
    assert report.results[-1].table == "profiles (reset)"
    assert report.message == "Data clearing completed. 11 operations successful, 0 errors."

    deleted = {r.table: r.deleted for r in report.results[:10]}
    assert deleted["crops"] == 2
    assert deleted["inventory"] == 0

    assert [r.user_id for r in memory_db.tables[ResourceName.CROPS]] == ["user-b"]

    profile = memory_db.profiles["user-a"]
    assert profile.full_name is None
    assert profile.farm_name is None
    assert profile.preferences == {}


@pytest.mark.asyncio
async def test_failure_on_one_table_does_not_stop_the_rest(memory_db):
    memory_db.seed(ResourceName.CROPS, "user-a", name="Rice")
    memory_db.seed(ResourceName.USER_PORTFOLIOS, "user-a", symbol="ITC", shares=5, average_cost=400)
    memory_db.failing.add(ResourceName.INVENTORY)

    report = await _service(memory_db).clear("user-a")

    failed = [r for r in report.results if not r.success]
    assert [r.table for r in failed] == ["inventory"]
    assert "locked" in failed[0].error
    assert report.error_count == 1
    assert memory_db.tables[ResourceName.CROPS] == []
    assert memory_db.tables[ResourceName.USER_PORTFOLIOS] == []
    assert failed[0].to_dict() == {"table": "inventory", "success": False, "error": failed[0].error}


@pytest.mark.asyncio
async def test_missing_profile_is_created_blank(memory_db):
    report = await _service(memory_db).clear("user-new")

    assert report.error_count == 0
    assert memory_db.profiles["user-new"].full_name is None


@pytest.mark.asyncio
async def test_stored_blobs_are_removed(memory_db, tmp_path):
    from farmdesk.infrastructure.storage.local_file_storage import LocalFileStorage

    storage = LocalFileStorage(str(tmp_path))
    blob = await storage.store("user-a", b"soil report", "report.pdf")
    kept = await storage.store("user-b", b"other", "other.pdf")

    await _service(memory_db, blob_storage=storage).clear("user-a")

    with pytest.raises(FileNotFoundError):
        await storage.read(blob.path)
    assert await storage.read(kept.path) == b"other"


def test_operation_count_counts_profile_reset(memory_db):
    assert _service(memory_db).operation_count == 11
