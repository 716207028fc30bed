"""
Sources Package

DataSource variants per jurisdiction and the factory that wires the defaults.
"""
from typing import Dict, Optional

from config.settings import Settings, settings as default_settings
from src.tenement_sync.models.tenement import Jurisdiction
from src.tenement_sync.scrapers.placeholder_generator import PROFILES, PlaceholderGenerator
from src.tenement_sync.scrapers.wa_tenement_scraper import WATenementScraper
from src.tenement_sync.sources.base import LIVE, PLACEHOLDER, DataSource, DataSourceInfo, SourcePage
from src.tenement_sync.sources.live import LiveAPISource
from src.tenement_sync.sources.placeholder import PlaceholderSource


def build_default_sources(settings: Optional[Settings] = None) -> Dict[Jurisdiction, DataSource]:
    """
    Build one DataSource per jurisdiction from settings.

    WA is live; the others are placeholders sized by their target counts.
    """
    settings = settings or default_settings

    sources: Dict[Jurisdiction, DataSource] = {
        Jurisdiction.WA: LiveAPISource(
            WATenementScraper(settings=settings),
            batch_size=settings.wa_batch_size,
        ),
    }

    placeholder_config = {
        Jurisdiction.NSW: (settings.nsw_target_count, settings.nsw_batch_size),
        Jurisdiction.VIC: (settings.vic_target_count, settings.vic_batch_size),
        Jurisdiction.NT: (settings.nt_target_count, settings.nt_batch_size),
        Jurisdiction.QLD: (settings.qld_target_count, settings.qld_batch_size),
        Jurisdiction.TAS: (settings.tas_target_count, settings.tas_batch_size),
    }
    for jurisdiction, (target_count, batch_size) in placeholder_config.items():
        generator = PlaceholderGenerator(
            PROFILES[jurisdiction],
            target_count=target_count,
            seed=settings.placeholder_seed,
        )
        sources[jurisdiction] = PlaceholderSource(generator, batch_size=batch_size)

    return sources


__all__ = [
    "LIVE",
    "PLACEHOLDER",
    "DataSource",
    "DataSourceInfo",
    "SourcePage",
    "LiveAPISource",
    "PlaceholderSource",
    "build_default_sources",
]
