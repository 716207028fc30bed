"""
WA Tenement Scraper

Fetches mining tenements from the WA Government SLIP ArcGIS MapServer
(Industry and Mining, layer 3). The service caps each response, so records
are paged with resultOffset after a count-only query establishes the total.
"""
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import requests
from pydantic import ValidationError

from config.settings import Settings, settings as default_settings
from src.tenement_sync.exceptions import EmptySourceError, SourceUnavailableError
from src.tenement_sync.models.tenement import Jurisdiction, TenementRecord
from src.tenement_sync.sync.cancellation import CancellationToken, pause
from src.tenement_sync.transformers.geometry import epoch_ms_to_date, ring_centroid
from src.tenement_sync.transformers.identity import normalize_tenement_number
from src.tenement_sync.utils.logger import get_logger
from src.tenement_sync.utils.retry import RetryExhaustedError, call_with_retry

logger = get_logger(__name__)


class ArcGISQueryError(Exception):
    """The service answered 200 with an ArcGIS error body."""


class EmptyPageError(Exception):
    """A page came back empty before the expected total was reached."""


class WATenementScraper:
    """
    Scraper for WA tenements from the SLIP ArcGIS REST API.

    Every request is retried up to ``max_retries`` attempts before the
    failure is raised as SourceUnavailableError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        page_size: Optional[int] = None,
        session: Optional[requests.Session] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        page_delay: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the WA scraper.

        Args:
            base_url: Override the default query URL (for testing)
            page_size: Records per request, clamped to the service cap
            session: Pre-configured requests session
            max_retries: Attempts per request
            retry_backoff: Base delay between attempts in seconds
            page_delay: Pause between pages in seconds
            sleep: Sleep function used when no cancellation token is given
            settings: Settings supplying every unset option (defaults to the
                module singleton)
        """
        settings = settings or default_settings
        self.base_url = base_url or settings.wa_tenements_url
        self.max_page_size = settings.wa_page_size
        self.page_size = min(page_size or self.max_page_size, self.max_page_size)
        self.session = session or requests.Session()
        self.max_retries = max_retries if max_retries is not None else settings.http_max_retries
        self.retry_backoff = retry_backoff if retry_backoff is not None else settings.http_retry_backoff_seconds
        self.page_delay = page_delay if page_delay is not None else settings.page_delay_seconds
        self.timeout = settings.http_timeout_seconds
        self.out_fields = settings.wa_out_fields
        self._sleep = sleep
        logger.info("wa_tenement_scraper_initialized", base_url=self.base_url, page_size=self.page_size)

    def fetch_count(self, cancel_token: Optional[CancellationToken] = None) -> int:
        """
        Query the total number of tenements available.

        Returns:
            Record count reported by the service

        Raises:
            SourceUnavailableError: if the count query fails after retries
        """
        params = {
            "where": "1=1",
            "returnCountOnly": "true",
            "f": "json",
        }
        data = self._query(params, "wa_count_query", cancel_token)

        try:
            count = int(data.get("count") or 0)
        except (TypeError, ValueError):
            raise SourceUnavailableError(
                f"WA count query returned an invalid count: {data.get('count')!r}",
                url=self.base_url,
            ) from None

        logger.info("wa_count_fetched", total=count)
        return count

    def fetch_page(
        self,
        offset: int,
        page_size: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
        require_features: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Fetch one page of features starting at ``offset``.

        Args:
            offset: resultOffset for the query
            page_size: resultRecordCount (clamped to the service cap)
            cancel_token: Optional cancellation token
            require_features: Treat an empty page as a retryable failure

        Returns:
            List of raw ArcGIS features

        Raises:
            SourceUnavailableError: if the page could not be fetched after retries
        """
        size = min(page_size or self.page_size, self.max_page_size)
        params = {
            "where": "1=1",
            "outFields": self.out_fields,
            "outSR": 4326,
            "f": "json",
            "returnGeometry": "true",
            "resultRecordCount": size,
            "resultOffset": offset,
        }

        def request_page() -> List[Dict[str, Any]]:
            data = self._get_json(params)
            features = data.get("features") or []
            if require_features and not features:
                raise EmptyPageError(f"No features returned for offset {offset}")
            return features

        features = self._with_retry(request_page, "wa_page_query", cancel_token, offset=offset)
        logger.info("wa_page_fetched", offset=offset, features_count=len(features))
        return features

    def iter_pages(
        self,
        total: int,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Iterator[List[Dict[str, Any]]]:
        """
        Yield pages in increasing offset order until ``total`` features are fetched.

        Raises:
            EmptySourceError: if the first page is empty after retries
            SourceUnavailableError: if a later page fails after retries
        """
        offset = 0
        while offset < total:
            try:
                features = self.fetch_page(offset, cancel_token=cancel_token, require_features=True)
            except SourceUnavailableError as e:
                if offset == 0 and isinstance(e.__cause__, EmptyPageError):
                    raise EmptySourceError(
                        f"No tenements returned from WA Government API (expected {total})"
                    ) from e
                raise

            yield features
            offset += len(features)

            if offset < total:
                pause(self.page_delay, cancel_token, self._sleep)

    def parse_feature(self, feature: Dict[str, Any], run_ref: str) -> Optional[TenementRecord]:
        """
        Convert one ArcGIS feature to a TenementRecord.

        Args:
            feature: Raw feature with "attributes" and "geometry"
            run_ref: Provenance tag for the bulk run

        Returns:
            TenementRecord, or None when the feature carries no tenement number

        Raises:
            ValidationError: if the attributes fail validation
        """
        attrs = feature.get("attributes") or {}
        number = normalize_tenement_number(attrs.get("fmt_tenid") or attrs.get("tenid"))
        if not number:
            return None

        geometry = feature.get("geometry") or None
        centroid = ring_centroid(geometry)

        return TenementRecord(
            jurisdiction=Jurisdiction.WA,
            number=number,
            type=attrs.get("type") or "Unknown",
            status=attrs.get("tenstatus") or "Unknown",
            holder_name=attrs.get("holder1") or "Unknown",
            grant_date=epoch_ms_to_date(attrs.get("grantdate")),
            application_date=epoch_ms_to_date(attrs.get("startdate")),
            expiry_date=epoch_ms_to_date(attrs.get("enddate")),
            area_ha=attrs.get("legal_area") or None,
            longitude=centroid[0] if centroid else None,
            latitude=centroid[1] if centroid else None,
            geometry=geometry,
            source_wfs_ref=number,
            source_mto_ref=run_ref,
        )

    def parse_features(
        self,
        features: List[Dict[str, Any]],
        run_ref: str,
    ) -> Tuple[List[TenementRecord], List[str]]:
        """
        Parse a page of features, collecting per-record errors.

        Returns:
            (records, errors) where features without a number are skipped silently
        """
        records: List[TenementRecord] = []
        errors: List[str] = []
        skipped = 0

        for feature in features:
            try:
                record = self.parse_feature(feature, run_ref)
            except ValidationError as e:
                attrs = feature.get("attributes") or {}
                tenement_id = attrs.get("fmt_tenid") or attrs.get("tenid") or "unknown"
                errors.append(f"Error processing tenement {tenement_id}: {e.errors()[0]['msg']}")
                logger.warning("wa_feature_validation_failed", tenement=tenement_id, error=str(e))
                continue

            if record is None:
                skipped += 1
                continue
            records.append(record)

        if skipped:
            logger.info("wa_features_without_number_skipped", skipped=skipped)

        return records, errors

    def _query(
        self,
        params: Dict[str, Any],
        operation: str,
        cancel_token: Optional[CancellationToken],
    ) -> Dict[str, Any]:
        return self._with_retry(lambda: self._get_json(params), operation, cancel_token)

    def _with_retry(self, func, operation: str, cancel_token: Optional[CancellationToken], **context):
        try:
            return call_with_retry(
                func,
                max_attempts=self.max_retries,
                backoff_seconds=self.retry_backoff,
                retry_on=(requests.RequestException, ValueError, ArcGISQueryError, EmptyPageError),
                cancel_token=cancel_token,
                operation=operation,
                sleep=self._sleep,
            )
        except RetryExhaustedError as e:
            logger.error(
                "api_request_failed",
                operation=operation,
                attempts=e.attempts,
                error=str(e.last_exception),
                error_type=type(e.last_exception).__name__,
                **context,
            )
            raise SourceUnavailableError(
                f"{operation} failed after {e.attempts} attempts: {e.last_exception}",
                url=self.base_url,
                attempts=e.attempts,
            ) from e.last_exception

    def _get_json(self, params: Dict[str, Any]) -> Dict[str, Any]:
        response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()

        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ArcGISQueryError(f"ArcGIS error: {message}")

        logger.debug("api_request_successful", status_code=response.status_code)
        return data
