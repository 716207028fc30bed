"""
Scrapers Package

Jurisdiction fetchers: the live WA Government ArcGIS scraper and the
placeholder generator used for jurisdictions without a live integration.
"""

from .wa_tenement_scraper import WATenementScraper
from .placeholder_generator import PlaceholderGenerator, JurisdictionProfile, PROFILES

__all__ = [
    "WATenementScraper",
    "PlaceholderGenerator",
    "JurisdictionProfile",
    "PROFILES",
]
