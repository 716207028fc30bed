"""
Live API Source

Wraps the WA Government ArcGIS scraper as a DataSource.
"""
import time
from typing import Iterator, Optional

from src.tenement_sync.exceptions import EmptySourceError, SourceUnavailableError
from src.tenement_sync.models.tenement import Jurisdiction
from src.tenement_sync.scrapers.wa_tenement_scraper import WATenementScraper
from src.tenement_sync.sources.base import LIVE, DataSource, DataSourceInfo, SourcePage
from src.tenement_sync.sync.cancellation import CancellationToken
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)


class LiveAPISource(DataSource):
    """Pages tenements from a government geospatial API."""

    kind = LIVE

    def __init__(
        self,
        scraper: WATenementScraper,
        batch_size: int,
        jurisdiction: Jurisdiction = Jurisdiction.WA,
    ):
        super().__init__(jurisdiction, batch_size)
        self.scraper = scraper

    def total_count(self, cancel_token: Optional[CancellationToken] = None) -> int:
        total = self.scraper.fetch_count(cancel_token=cancel_token)
        if total <= 0:
            raise EmptySourceError(
                f"No tenements found from {self.jurisdiction.value} Government API"
            )
        return total

    def iter_pages(self, total: int, cancel_token: Optional[CancellationToken] = None) -> Iterator[SourcePage]:
        """
        Yield parsed pages from the API.

        A page that still fails after retries ends paging. When at least one
        page was already fetched this is a partial failure: a final truncated
        page carries the error and the run completes with what it has.
        """
        run_ref = f"{self.jurisdiction.value.lower()}-bulk-{int(time.time() * 1000)}"
        fetched = 0
        pages = self.scraper.iter_pages(total, cancel_token=cancel_token)

        while True:
            try:
                features = next(pages)
            except StopIteration:
                return
            except SourceUnavailableError as e:
                if fetched == 0:
                    raise
                logger.warning(
                    "live_source_paging_stopped",
                    jurisdiction=self.jurisdiction.value,
                    fetched=fetched,
                    total=total,
                    error=str(e),
                )
                yield SourcePage(
                    records=[],
                    fetched=0,
                    errors=[f"Stopped fetching at offset {fetched} of {total}: {e}"],
                    truncated=True,
                )
                return

            records, errors = self.scraper.parse_features(features, run_ref)
            fetched += len(features)
            yield SourcePage(records=records, fetched=len(features), errors=errors)

    def describe(self) -> DataSourceInfo:
        return DataSourceInfo(
            id=f"{self.jurisdiction.value.lower()}-slip",
            name="WA Government SLIP API",
            jurisdiction=self.jurisdiction.value,
            type=self.kind,
            url=self.scraper.base_url,
            description="WA Government SLIP Industry and Mining MapServer - tenements layer",
            batch_size=self.batch_size,
        )
