"""
Placeholder Source

Wraps a PlaceholderGenerator as a DataSource for jurisdictions without a
live integration.
"""
from typing import Iterator, Optional

from src.tenement_sync.scrapers.placeholder_generator import PlaceholderGenerator
from src.tenement_sync.sources.base import PLACEHOLDER, DataSource, DataSourceInfo, SourcePage
from src.tenement_sync.sync.cancellation import CancellationToken, checkpoint


class PlaceholderSource(DataSource):
    """Yields generated records one batch at a time."""

    kind = PLACEHOLDER

    def __init__(self, generator: PlaceholderGenerator, batch_size: int):
        super().__init__(generator.jurisdiction, batch_size)
        self.generator = generator

    def total_count(self, cancel_token: Optional[CancellationToken] = None) -> int:
        return self.generator.target_count

    def iter_pages(self, total: int, cancel_token: Optional[CancellationToken] = None) -> Iterator[SourcePage]:
        limit = min(total, self.generator.target_count)
        for start in range(1, limit + 1, self.batch_size):
            checkpoint(cancel_token)
            stop = min(start + self.batch_size, limit + 1)
            records = self.generator.generate(start, stop)
            yield SourcePage(records=records, fetched=len(records))

    def describe(self) -> DataSourceInfo:
        profile = self.generator.profile
        return DataSourceInfo(
            id=f"{self.jurisdiction.value.lower()}-placeholder",
            name=profile.source_name,
            jurisdiction=self.jurisdiction.value,
            type=self.kind,
            url=profile.source_url,
            description=f"Generated placeholder records until a live {profile.source_name} integration exists",
            batch_size=self.batch_size,
            expected_records=self.generator.target_count,
        )
