"""
ETL Package

Normalization and batched loading of tenements into the database.
"""
from src.tenement_sync.etl.normalizer import TenementNormalizer
from src.tenement_sync.etl.upserter import BatchUpserter, UpsertResult

__all__ = [
    "TenementNormalizer",
    "BatchUpserter",
    "UpsertResult",
]
