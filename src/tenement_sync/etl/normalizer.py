"""
Tenement Normalizer

Converts fetched TenementRecord models into rows for the tenements table.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from src.tenement_sync.models.tenement import TenementRecord
from src.tenement_sync.transformers.identity import derive_tenement_uuid


class TenementNormalizer:
    """
    Map pydantic tenement records to ``tenements`` row dictionaries.

    Every row produced by one normalizer shares the same ``last_sync_at``,
    so rows written by a run can be told apart from rows it did not touch.
    """

    def __init__(self, synced_at: Optional[datetime] = None):
        self.synced_at = synced_at or datetime.now(timezone.utc)

    def normalize(self, record: TenementRecord) -> Dict[str, Any]:
        jurisdiction = record.jurisdiction.value
        return {
            'id': derive_tenement_uuid(jurisdiction, record.number),
            'jurisdiction': jurisdiction,
            'number': record.number,
            'type': record.type,
            'status': record.status,
            'holder_name': record.holder_name,
            'area_ha': record.area_ha,
            'grant_date': record.grant_date,
            'application_date': record.application_date,
            'expiry_date': record.expiry_date,
            'longitude': record.longitude,
            'latitude': record.latitude,
            'geometry': record.geometry,
            'last_sync_at': self.synced_at,
            'source_wfs_ref': record.source_wfs_ref,
            'source_mto_ref': record.source_mto_ref,
        }

    def normalize_batch(self, records: Iterable[TenementRecord]) -> List[Dict[str, Any]]:
        """
        Normalize a batch, collapsing records that map to the same id.

        PostgreSQL rejects an ON CONFLICT statement that touches the same row
        twice, so only the last record for each id is kept.
        """
        rows: Dict[str, Dict[str, Any]] = {}
        for record in records:
            row = self.normalize(record)
            rows[row['id']] = row
        return list(rows.values())
