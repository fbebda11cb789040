"""Unit tests for import processing."""

from unittest.mock import AsyncMock, Mock

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect

from campsite_ingest.models.import_candidate import ImportCandidateStatus, ProcessedPlace
from campsite_ingest.models.place import RawPlace, RawPlaceStatus
from campsite_ingest.services.database import (
    CampsiteRepository,
    ImportCandidateRepository,
    RawPlaceRepository,
)
from campsite_ingest.services.duplicate_detection import DuplicateDetectionService
from campsite_ingest.services.import_processing import (
    ImportProcessingService,
    ProcessingAlreadyRunningError,
    determine_status,
)
from campsite_ingest.services.type_classifier import TypeClassifierService
from campsite_ingest.utils.retry import RetryConfig
from tests.factories import create_campsite_entry, create_google_place, create_raw_place


@pytest.fixture
def campsite_repo():
    repo = Mock(spec=CampsiteRepository)
    repo.search_by_name = AsyncMock(return_value=[])
    repo.find_nearby = AsyncMock(return_value=[])
    repo.find_by_phone = AsyncMock(return_value=[])
    repo.find_by_website = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def raw_place_repo():
    repo = Mock(spec=RawPlaceRepository)
    repo.get_by_id = AsyncMock(return_value=None)
    repo.mark_processed = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def candidate_repo():
    repo = Mock(spec=ImportCandidateRepository)
    repo.upsert_for_raw_place = AsyncMock(side_effect=lambda candidate: candidate)
    return repo


def make_service(campsite_repo, raw_place_repo, candidate_repo, **kwargs):
    return ImportProcessingService(
        raw_place_repository=raw_place_repo,
        import_candidate_repository=candidate_repo,
        duplicate_service=DuplicateDetectionService(campsite_repo),
        type_classifier=TypeClassifierService(),
        retry_config=RetryConfig(max_retries=2, initial_delay=0.0, jitter=False),
        delay_seconds=0,
        **kwargs,
    )


def stored_raw_place(**place_overrides) -> RawPlace:
    return RawPlace(**create_raw_place(raw_data=create_google_place(**place_overrides)))


@pytest.mark.unit
class TestDetermineStatus:
    """Test initial candidate status."""

    def _processed(self, is_duplicate: bool) -> ProcessedPlace:
        return ProcessedPlace(
            raw_place_id=ObjectId(),
            place_id="ChIJ",
            name="Camp",
            address="1 Camp Road",
            confidence_score=0.9,
            is_duplicate=is_duplicate,
            duplicate_of_campsite_id=ObjectId() if is_duplicate else None,
        )

    def test_duplicate_is_rejected(self):
        assert determine_status(self._processed(True)) == ImportCandidateStatus.REJECTED

    def test_new_place_is_pending(self):
        assert determine_status(self._processed(False)) == ImportCandidateStatus.PENDING


@pytest.mark.unit
class TestProcessPlace:
    """Test single place evaluation."""

    @pytest.mark.asyncio
    async def test_missing_raw_place(self, campsite_repo, raw_place_repo, candidate_repo):
        service = make_service(campsite_repo, raw_place_repo, candidate_repo)

        assert await service.process_place(ObjectId()) is None

    @pytest.mark.asyncio
    async def test_new_place(self, campsite_repo, raw_place_repo, candidate_repo):
        raw_place = stored_raw_place()
        raw_place_repo.get_by_id.return_value = raw_place
        service = make_service(campsite_repo, raw_place_repo, candidate_repo)

        processed = await service.process_place(raw_place.id)

        assert processed.raw_place_id == raw_place.id
        assert processed.name == "Doi Luang Camping"
        assert processed.is_duplicate is False
        assert processed.duplicate_of_campsite_id is None
        assert processed.suggested_type_id == 1
        assert processed.validation_warnings == []
        assert processed.processed_data["location"] == {"lat": 18.9123, "lng": 98.9442}
        assert processed.processed_data["similar_campsites"] == []
        campsite_repo.find_by_phone.assert_awaited_once_with("053123456")
        campsite_repo.find_by_website.assert_awaited_once_with("doiluangcamping.com")

    @pytest.mark.asyncio
    async def test_duplicate_place(self, campsite_repo, raw_place_repo, candidate_repo):
        raw_place = stored_raw_place()
        existing = create_campsite_entry(
            name="Doi Luang Camping",
            address="99 Moo 5, Mae Rim, Chiang Mai 50180",
            phone="053-123-456",
        )
        campsite_repo.search_by_name.return_value = [existing]
        campsite_repo.find_by_phone.return_value = [existing]
        raw_place_repo.get_by_id.return_value = raw_place
        service = make_service(campsite_repo, raw_place_repo, candidate_repo)

        processed = await service.process_place(raw_place.id)

        assert processed.is_duplicate is True
        assert processed.duplicate_of_campsite_id == existing.id
        assert processed.confidence_score >= 0.9
        similar = processed.processed_data["similar_campsites"]
        assert len(similar) == 1
        assert similar[0]["campsite_id"] == str(existing.id)

    @pytest.mark.asyncio
    async def test_warnings_for_sparse_place(self, campsite_repo, raw_place_repo, candidate_repo):
        raw_place = stored_raw_place(formatted_phone_number=None, website=None, rating=2.5)
        raw_place_repo.get_by_id.return_value = raw_place
        service = make_service(campsite_repo, raw_place_repo, candidate_repo)

        processed = await service.process_place(raw_place.id)

        assert processed.validation_warnings == [
            "Missing phone number",
            "Missing website",
            "Low or missing rating",
        ]
        campsite_repo.find_by_phone.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transient_lookup_error_retried(
        self, campsite_repo, raw_place_repo, candidate_repo
    ):
        raw_place = stored_raw_place()
        raw_place_repo.get_by_id.return_value = raw_place
        campsite_repo.search_by_name.side_effect = [AutoReconnect("not primary"), []]
        service = make_service(campsite_repo, raw_place_repo, candidate_repo)

        processed = await service.process_place(raw_place.id)

        assert processed is not None
        assert campsite_repo.search_by_name.await_count == 2

    @pytest.mark.asyncio
    async def test_lookup_failure_returns_none(
        self, campsite_repo, raw_place_repo, candidate_repo
    ):
        raw_place = stored_raw_place()
        raw_place_repo.get_by_id.return_value = raw_place
        campsite_repo.find_nearby.side_effect = ValueError("bad query")
        service = make_service(campsite_repo, raw_place_repo, candidate_repo)

        assert await service.process_place(raw_place.id) is None


@pytest.mark.unit
class TestProcessPlaces:
    """Test batch processing."""

    @pytest.mark.asyncio
    async def test_batch_summary(self, campsite_repo, raw_place_repo, candidate_repo):
        good = stored_raw_place()
        missing_id = ObjectId()
        raw_place_repo.get_by_id.side_effect = lambda raw_id: good if raw_id == good.id else None
        service = make_service(campsite_repo, raw_place_repo, candidate_repo)

        summary = await service.process_places([good.id, missing_id])

        assert summary.successful == 1
        assert summary.failed == 1
        assert summary.candidates_created == 1
        raw_place_repo.mark_processed.assert_any_await(good.id)
        raw_place_repo.mark_processed.assert_any_await(missing_id, RawPlaceStatus.FAILED)
        saved = candidate_repo.upsert_for_raw_place.await_args.args[0]
        assert saved.google_place_raw_id == good.id
        assert saved.status == ImportCandidateStatus.PENDING.value
        assert service.is_processing is False

    @pytest.mark.asyncio
    async def test_save_failure_not_counted(self, campsite_repo, raw_place_repo, candidate_repo):
        good = stored_raw_place()
        raw_place_repo.get_by_id.return_value = good
        candidate_repo.upsert_for_raw_place.side_effect = RuntimeError("write failed")
        service = make_service(campsite_repo, raw_place_repo, candidate_repo)

        summary = await service.process_places([good.id])

        assert summary.successful == 1
        assert summary.candidates_created == 0

    @pytest.mark.asyncio
    async def test_rejects_concurrent_batch(self, campsite_repo, raw_place_repo, candidate_repo):
        service = make_service(campsite_repo, raw_place_repo, candidate_repo)
        service._is_processing = True

        with pytest.raises(ProcessingAlreadyRunningError):
            await service.process_places([ObjectId()])
