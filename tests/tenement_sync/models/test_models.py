"""
Tests for tenement and progress models
"""
import pytest
from pydantic import ValidationError

from src.tenement_sync.exceptions import UnknownJurisdictionError
from src.tenement_sync.models.progress import FullSyncResult, SyncProgress, SyncResult, SyncStatus
from src.tenement_sync.models.tenement import ALL_JURISDICTIONS, Jurisdiction, TenementRecord


class TestJurisdiction:
    def test_parse_is_case_insensitive(self):
        assert Jurisdiction.parse("wa") == Jurisdiction.WA
        assert Jurisdiction.parse(" Tas ") == Jurisdiction.TAS
        assert Jurisdiction.parse(Jurisdiction.NT) == Jurisdiction.NT

    def test_parse_unknown(self):
        with pytest.raises(UnknownJurisdictionError, match="Unknown jurisdiction: SA"):
            Jurisdiction.parse("SA")

    def test_full_sync_order(self):
        assert [j.value for j in ALL_JURISDICTIONS] == ["WA", "NSW", "VIC", "NT", "QLD", "TAS"]


class TestTenementRecord:
    def test_defaults(self):
        record = TenementRecord(jurisdiction="qld", number=" EPM25001 ")

        assert record.jurisdiction == Jurisdiction.QLD
        assert record.number == "EPM25001"
        assert record.type == "Unknown"
        assert record.holder_name == "Unknown"
        assert not record.has_coordinates()

    def test_blank_number_rejected(self):
        with pytest.raises(ValidationError):
            TenementRecord(jurisdiction="WA", number="   ")

    def test_negative_area_rejected(self):
        with pytest.raises(ValidationError):
            TenementRecord(jurisdiction="WA", number="E 1", area_ha=-1)

    def test_coordinates_bounded(self):
        with pytest.raises(ValidationError):
            TenementRecord(jurisdiction="WA", number="E 1", latitude=-95)

    def test_unknown_jurisdiction_rejected(self):
        with pytest.raises((ValidationError, UnknownJurisdictionError)):
            TenementRecord(jurisdiction="SA", number="EL1")


class TestSyncStatus:
    def test_transitions(self):
        assert SyncStatus.IDLE.can_transition_to(SyncStatus.SYNCING)
        assert SyncStatus.SYNCING.can_transition_to(SyncStatus.SYNCING)
        assert SyncStatus.SYNCING.can_transition_to(SyncStatus.COMPLETED)
        assert SyncStatus.SYNCING.can_transition_to(SyncStatus.ERROR)
        assert SyncStatus.COMPLETED.can_transition_to(SyncStatus.SYNCING)
        assert not SyncStatus.IDLE.can_transition_to(SyncStatus.COMPLETED)
        assert not SyncStatus.COMPLETED.can_transition_to(SyncStatus.ERROR)
        assert not SyncStatus.ERROR.can_transition_to(SyncStatus.ERROR)


class TestSyncProgress:
    def test_payload_uses_camel_case(self):
        snapshot = SyncProgress(
            status=SyncStatus.SYNCING,
            progress=40,
            current_record=400,
            total_records=1000,
            message="Synced 400/1000 records",
            start_time=1700000000000,
            estimated_time_remaining=1500,
        )

        payload = snapshot.to_payload()

        assert payload["status"] == "syncing"
        assert payload["currentRecord"] == 400
        assert payload["totalRecords"] == 1000
        assert payload["startTime"] == 1700000000000
        assert payload["estimatedTimeRemaining"] == 1500

    def test_accepts_camel_case_input(self):
        snapshot = SyncProgress.model_validate({"status": "completed", "progress": 100, "currentRecord": 5})

        assert snapshot.current_record == 5

    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            SyncProgress(progress=101)


class TestSyncResult:
    def test_failed(self):
        result = SyncResult.failed("NT", "API down")

        assert result.success is False
        assert result.imported == 0
        assert result.errors == ["API down"]
        assert result.message == "Failed to sync NT data"
        assert result.timestamp.endswith("Z")

    def test_full_sync_payload_aliases(self):
        payload = FullSyncResult(total_imported=3, successful_syncs=1, total_jurisdictions=6).to_payload()

        assert payload["totalImported"] == 3
        assert payload["successfulSyncs"] == 1
        assert payload["totalJurisdictions"] == 6
        assert payload["success"] is True
