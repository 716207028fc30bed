"""
Tenement Identity

Derives the stable row identifier for a tenement so that re-syncing the same
external record always upserts the same row.
"""
import hashlib
from typing import Optional


def normalize_tenement_number(raw: Optional[str]) -> Optional[str]:
    """
    Normalize a tenement number as reported by a source.

    Args:
        raw: Raw tenement number

    Returns:
        Stripped number, or None when blank
    """
    if raw is None:
        return None
    normalized = str(raw).strip()
    return normalized or None


def derive_tenement_uuid(jurisdiction: str, number: str) -> str:
    """
    Map (jurisdiction, tenement number) to a UUID-formatted identifier.

    The SHA-256 digest of "{JURISDICTION}-{number}" is laid out in 8-4-4-4-12
    grouping with the version nibble forced to 4 and the variant nibble into
    8-b, so the value is accepted anywhere a random-form UUID is expected.

    Args:
        jurisdiction: Jurisdiction code (case-insensitive)
        number: Jurisdiction-local tenement number

    Returns:
        36 character UUID string
    """
    code = getattr(jurisdiction, "value", jurisdiction)
    digest = hashlib.sha256(f"{str(code).upper()}-{number}".encode("utf-8")).hexdigest()

    variant = format((int(digest[16], 16) & 0x3) | 0x8, "x")
    return "-".join([
        digest[0:8],
        digest[8:12],
        "4" + digest[13:16],
        variant + digest[17:20],
        digest[20:32],
    ])
