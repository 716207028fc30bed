"""
Tests for WATenementScraper
"""
import pytest
import requests
from datetime import date
from unittest.mock import MagicMock, Mock, patch

from config.settings import Settings
from src.tenement_sync.exceptions import EmptySourceError, SourceUnavailableError
from src.tenement_sync.models.tenement import Jurisdiction
from src.tenement_sync.scrapers.wa_tenement_scraper import WATenementScraper
from src.tenement_sync.sync.cancellation import CancellationToken
from src.tenement_sync.exceptions import SyncCancelledError

BASE_URL = "https://example.com/MapServer/3/query"


def make_response(data):
    response = Mock()
    response.json.return_value = data
    response.raise_for_status.return_value = None
    response.status_code = 200
    return response


def make_feature(number, area=10.0, rings=None):
    return {
        "attributes": {
            "fmt_tenid": number,
            "type": "EXPLORATION LICENCE",
            "tenstatus": "LIVE",
            "holder1": "ACME MINING PTY LTD",
            "grantdate": 1577836800000,
            "startdate": 1546300800000,
            "enddate": 1735689600000,
            "legal_area": area,
            "unit_of_me": "HA",
        },
        "geometry": {"rings": rings or [[[120, -30], [122, -30], [122, -28], [120, -28]]]},
    }


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def scraper(session):
    return WATenementScraper(
        base_url=BASE_URL,
        page_size=2,
        session=session,
        max_retries=3,
        retry_backoff=0,
        page_delay=0,
    )


class TestWATenementScraper:
    """Tests for the WA SLIP ArcGIS scraper."""

    def test_scraper_initialization(self):
        """Default scraper uses the configured service URL."""
        scraper = WATenementScraper()
        assert "services.slip.wa.gov.au" in scraper.base_url
        assert scraper.page_size == 2000
        assert scraper.session is not None

    def test_page_size_clamped_to_service_cap(self):
        scraper = WATenementScraper(page_size=5000, session=MagicMock())
        assert scraper.page_size == 2000

    @patch('src.tenement_sync.scrapers.wa_tenement_scraper.requests.Session')
    def test_creates_session_when_not_given(self, mock_session):
        scraper = WATenementScraper(base_url=BASE_URL)
        assert scraper.session is mock_session.return_value

    def test_fetch_count(self, scraper, session):
        session.get.return_value = make_response({"count": 5})

        assert scraper.fetch_count() == 5

        params = session.get.call_args.kwargs["params"]
        assert params["where"] == "1=1"
        assert params["returnCountOnly"] == "true"
        assert params["f"] == "json"

    def test_fetch_count_invalid_value(self, scraper, session):
        session.get.return_value = make_response({"count": "lots"})

        with pytest.raises(SourceUnavailableError):
            scraper.fetch_count()

    def test_fetch_page_query_parameters(self, scraper, session):
        session.get.return_value = make_response({"features": [make_feature("E 45/1")]})

        features = scraper.fetch_page(offset=4)

        assert len(features) == 1
        params = session.get.call_args.kwargs["params"]
        assert params["resultOffset"] == 4
        assert params["resultRecordCount"] == 2
        assert params["returnGeometry"] == "true"
        assert "fmt_tenid" in params["outFields"]

    def test_fetch_page_uses_injected_settings(self, session):
        settings = Settings(wa_page_size=100, wa_out_fields="fmt_tenid", http_timeout_seconds=7)
        scraper = WATenementScraper(base_url=BASE_URL, session=session, settings=settings)
        session.get.return_value = make_response({"features": [make_feature("E 45/1")]})

        scraper.fetch_page(offset=0, page_size=1000)

        params = session.get.call_args.kwargs["params"]
        assert params["resultRecordCount"] == 100
        assert params["outFields"] == "fmt_tenid"
        assert session.get.call_args.kwargs["timeout"] == 7

    def test_iter_pages_requests_increasing_offsets(self, scraper, session):
        session.get.side_effect = [
            make_response({"features": [make_feature("E 1"), make_feature("E 2")]}),
            make_response({"features": [make_feature("E 3"), make_feature("E 4")]}),
            make_response({"features": [make_feature("E 5")]}),
        ]

        pages = list(scraper.iter_pages(5))

        assert [len(page) for page in pages] == [2, 2, 1]
        offsets = [c.kwargs["params"]["resultOffset"] for c in session.get.call_args_list]
        assert offsets == [0, 2, 4]

    def test_failed_page_is_retried(self, scraper, session):
        session.get.side_effect = [
            requests.ConnectionError("connection reset"),
            make_response({"features": [make_feature("E 1")]}),
        ]

        features = scraper.fetch_page(0)

        assert len(features) == 1
        assert session.get.call_count == 2

    def test_failure_after_retries_raises(self, scraper, session):
        session.get.side_effect = requests.Timeout("timed out")

        with pytest.raises(SourceUnavailableError) as exc_info:
            scraper.fetch_page(0)

        assert exc_info.value.attempts == 3
        assert session.get.call_count == 3

    def test_arcgis_error_body_counts_as_failure(self, scraper, session):
        session.get.return_value = make_response({"error": {"code": 400, "message": "Invalid query"}})

        with pytest.raises(SourceUnavailableError, match="Invalid query"):
            scraper.fetch_count()

    def test_empty_first_page_is_run_level_error(self, scraper, session):
        session.get.return_value = make_response({"features": []})

        with pytest.raises(EmptySourceError):
            next(scraper.iter_pages(5))

        assert session.get.call_count == 3

    def test_empty_later_page_raises_source_unavailable(self, scraper, session):
        session.get.side_effect = [
            make_response({"features": [make_feature("E 1"), make_feature("E 2")]}),
            make_response({"features": []}),
            make_response({"features": []}),
            make_response({"features": []}),
        ]

        pages = scraper.iter_pages(5)
        assert len(next(pages)) == 2
        with pytest.raises(SourceUnavailableError):
            next(pages)

    def test_cancelled_token_stops_before_request(self, scraper, session):
        token = CancellationToken()
        token.cancel("stop")

        with pytest.raises(SyncCancelledError):
            scraper.fetch_page(0, cancel_token=token)

        session.get.assert_not_called()


class TestParseFeature:
    """Tests for feature to TenementRecord mapping."""

    def test_parse_feature(self, scraper):
        record = scraper.parse_feature(make_feature("E 45/1234", area=120.5), "wa-bulk-1700000000000")

        assert record.jurisdiction == Jurisdiction.WA
        assert record.number == "E 45/1234"
        assert record.type == "EXPLORATION LICENCE"
        assert record.status == "LIVE"
        assert record.holder_name == "ACME MINING PTY LTD"
        assert record.area_ha == 120.5
        assert record.grant_date == date(2020, 1, 1)
        assert record.application_date == date(2019, 1, 1)
        assert record.expiry_date == date(2025, 1, 1)
        assert record.longitude == 121.0
        assert record.latitude == -29.0
        assert record.geometry["rings"]
        assert record.source_wfs_ref == "E 45/1234"
        assert record.source_mto_ref == "wa-bulk-1700000000000"

    def test_falls_back_to_tenid(self, scraper):
        feature = make_feature(None)
        feature["attributes"]["tenid"] = "M 15/1789"

        record = scraper.parse_feature(feature, "ref")

        assert record.number == "M 15/1789"

    def test_missing_number_is_skipped(self, scraper):
        assert scraper.parse_feature(make_feature("  "), "ref") is None

    def test_missing_attributes_default_to_unknown(self, scraper):
        record = scraper.parse_feature({"attributes": {"fmt_tenid": "P 70/1"}}, "ref")

        assert record.type == "Unknown"
        assert record.status == "Unknown"
        assert record.holder_name == "Unknown"
        assert record.longitude is None

    def test_parse_features_collects_errors(self, scraper):
        features = [
            make_feature("E 1"),
            make_feature("E 2", area=-5),
            make_feature(""),
        ]

        records, errors = scraper.parse_features(features, "ref")

        assert [r.number for r in records] == ["E 1"]
        assert len(errors) == 1
        assert "E 2" in errors[0]
