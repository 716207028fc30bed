"""
Data Source Capability

A DataSource yields a jurisdiction's tenements page by page. Orchestration
only talks to this interface, so a live integration can replace a
placeholder without touching the orchestrator.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from pydantic import BaseModel

from src.tenement_sync.models.tenement import Jurisdiction, TenementRecord
from src.tenement_sync.sync.cancellation import CancellationToken

LIVE = "live"
PLACEHOLDER = "placeholder"


@dataclass
class SourcePage:
    """
    One unit of fetched work.

    Attributes:
        records: Valid records ready for normalization
        fetched: Raw items consumed from the source, including skipped ones
        errors: Per-record or paging errors raised while producing this page
        truncated: The source gave up before reaching its expected total
    """
    records: List[TenementRecord]
    fetched: int
    errors: List[str] = field(default_factory=list)
    truncated: bool = False


class DataSourceInfo(BaseModel):
    """Descriptive metadata for a jurisdiction's data source."""

    id: str
    name: str
    jurisdiction: str
    type: str
    url: Optional[str] = None
    description: str = ""
    batch_size: int
    expected_records: Optional[int] = None


class DataSource(ABC):
    """Produces tenements for one jurisdiction."""

    kind: str = LIVE

    def __init__(self, jurisdiction: Jurisdiction, batch_size: int):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.jurisdiction = jurisdiction
        self.batch_size = batch_size

    @abstractmethod
    def total_count(self, cancel_token: Optional[CancellationToken] = None) -> int:
        """
        Number of records the run should expect.

        Raises:
            RunLevelError: if the source cannot report a count
        """

    @abstractmethod
    def iter_pages(self, total: int, cancel_token: Optional[CancellationToken] = None) -> Iterator[SourcePage]:
        """
        Yield pages in source order until ``total`` items are consumed.

        Raises:
            RunLevelError: if the source fails before producing any data
        """

    @abstractmethod
    def describe(self) -> DataSourceInfo:
        """Metadata shown by the data sources endpoint."""
