"""Unit tests for attachments and local blob storage."""

import pytest

from farmdesk.application.services import AttachmentService, RecordService
from farmdesk.domain.entities import ResourceName
from farmdesk.domain.exceptions import NotFoundError, ValidationError
from farmdesk.infrastructure.storage.local_file_storage import LocalFileStorage


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def service(memory_db, storage) -> AttachmentService:
    records = RecordService(memory_db.repository(ResourceName.CROP_ATTACHMENTS))
    return AttachmentService(records, storage, max_size_bytes=1024)


@pytest.mark.asyncio
async def test_store_names_blob_under_owner_folder(storage):
    blob = await storage.store("user-a", b"%PDF-1.4", "Soil Test (May).pdf")

    assert blob.path.startswith("user-a-")
    assert storage.owns("user-a", blob.path)
    assert not storage.owns("user-b", blob.path)
    assert blob.path.endswith(".pdf")
    assert "Soil_Test__May" in blob.filename
    assert blob.size == 8
    assert blob.mime_type == "application/pdf"
    assert await storage.read(blob.path) == b"%PDF-1.4"


@pytest.mark.asyncio
async def test_read_refuses_paths_outside_root(storage):
    with pytest.raises(FileNotFoundError):
        await storage.read("../../etc/passwd")


@pytest.mark.asyncio
async def test_upload_stores_blob_and_metadata(service, memory_db):
    record = await service.upload(
        "user-a", b"leaf photo", "leaf.jpg", content_type="image/jpeg", crop_id="crop-1"
    )

    assert record.data["file_name"] == "leaf.jpg"
    assert record.data["file_type"] == "image/jpeg"
    assert record.data["file_size"] == 10
    assert record.data["crop_id"] == "crop-1"

    stored, content = await service.download("user-a", record.id)
    assert stored.id == record.id
    assert content == b"leaf photo"


@pytest.mark.asyncio
async def test_upload_rejects_empty_and_oversized(service):
    with pytest.raises(ValidationError):
        await service.upload("user-a", b"", "empty.txt")
    with pytest.raises(ValidationError):
        await service.upload("user-a", b"x" * 2048, "big.bin")


@pytest.mark.asyncio
async def test_download_is_owner_scoped(service):
    record = await service.upload("user-a", b"data", "notes.txt")

    with pytest.raises(NotFoundError):
        await service.download("user-b", record.id)


@pytest.mark.asyncio
async def test_download_refuses_foreign_file_path(service, memory_db):
    forged = memory_db.seed(
        ResourceName.CROP_ATTACHMENTS,
        "user-b",
        file_name="x",
        file_path="user-a/secret.pdf",
        file_type="application/pdf",
    )

    with pytest.raises(NotFoundError):
        await service.download("user-b", forged.id)


@pytest.mark.asyncio
async def test_delete_removes_metadata_and_blob_and_is_idempotent(service, storage, memory_db):
    record = await service.upload("user-a", b"data", "notes.txt")
    path = record.data["file_path"]

    assert await service.delete("user-a", record.id) is True
    assert await service.delete("user-a", record.id) is False
    assert memory_db.tables[ResourceName.CROP_ATTACHMENTS] == []
    with pytest.raises(FileNotFoundError):
        await storage.read(path)


@pytest.mark.asyncio
async def test_traversing_file_path_cannot_reach_another_owner(service, storage, memory_db):
    own = await storage.store("user-a", b"mine", "mine.txt")
    theirs = await service.upload("user-b", b"BOB-SECRET", "secret.txt")
    bob_path = theirs.data["file_path"]
    alice_folder = own.path.split("/")[0]
    forged = memory_db.seed(
        ResourceName.CROP_ATTACHMENTS,
        "user-a",
        file_name="secret.txt",
        file_path=f"{alice_folder}/../{bob_path}",
        file_type="text/plain",
    )

    with pytest.raises(NotFoundError):
        await service.download("user-a", forged.id)
    assert await service.delete("user-a", forged.id) is True
    assert await storage.read(bob_path) == b"BOB-SECRET"


@pytest.mark.asyncio
async def test_owner_ids_with_punctuation_round_trip(service, storage):
    record = await service.upload("alice@farm.in", b"a", "a.txt")
    path = record.data["file_path"]

    _, content = await service.download("alice@farm.in", record.id)
    assert content == b"a"

    assert await service.delete("alice@farm.in", record.id) is True
    with pytest.raises(FileNotFoundError):
        await storage.read(path)


@pytest.mark.asyncio
async def test_similar_owner_ids_get_separate_folders(storage):
    dotted = await storage.store("alice.farm", b"dotted", "a.txt")
    underscored = await storage.store("alice_farm", b"underscored", "a.txt")

    assert dotted.path.split("/")[0] != underscored.path.split("/")[0]
    assert not storage.owns("alice_farm", dotted.path)

    assert await storage.delete_owner("alice.farm") == 1
    assert await storage.read(underscored.path) == b"underscored"


@pytest.mark.asyncio
async def test_only_managed_fields_can_be_set_by_the_backend(memory_db):
    records = RecordService(memory_db.repository(ResourceName.CROPS))

    with pytest.raises(ValueError):
        await records.create_record("user-a", {"name": "Rice"}, managed={"name": "Wheat"})
