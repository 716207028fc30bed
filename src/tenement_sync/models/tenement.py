"""
Tenement Data Models

Pydantic models for mining tenement records fetched from jurisdiction sources.
"""
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from src.tenement_sync.exceptions import UnknownJurisdictionError


class Jurisdiction(str, Enum):
    """Australian state/territory mining-title authorities."""

    WA = "WA"
    NSW = "NSW"
    VIC = "VIC"
    NT = "NT"
    QLD = "QLD"
    TAS = "TAS"

    @classmethod
    def parse(cls, value: Any) -> "Jurisdiction":
        """
        Resolve a jurisdiction code case-insensitively.

        Raises:
            UnknownJurisdictionError: if the code is not supported
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise UnknownJurisdictionError(str(value)) from None


# Order used by the full sync
ALL_JURISDICTIONS: List[Jurisdiction] = [
    Jurisdiction.WA,
    Jurisdiction.NSW,
    Jurisdiction.VIC,
    Jurisdiction.NT,
    Jurisdiction.QLD,
    Jurisdiction.TAS,
]


class TenementRecord(BaseModel):
    """
    Tenement record as produced by a jurisdiction data source.

    The stable ``id`` is not part of the fetched record; it is derived from
    ``(jurisdiction, number)`` when the record is normalized for upsert.

    Attributes:
        jurisdiction: Issuing jurisdiction
        number: Jurisdiction-local tenement identifier (e.g. "M 15/1789")
        type: Tenement type (EL, ML, PL, ...)
        status: Title status as reported by the source
        holder_name: Primary holder
        area_ha: Legal area in hectares
        grant_date: Date the title was granted
        application_date: Date the application was lodged
        expiry_date: Date the title expires
        longitude: WGS84 longitude of the tenement centroid
        latitude: WGS84 latitude of the tenement centroid
        geometry: Raw source geometry (ArcGIS rings or GeoJSON point)
        source_wfs_ref: Provenance tag for the feature service reference
        source_mto_ref: Provenance tag for the bulk run that fetched it
    """

    jurisdiction: Jurisdiction = Field(..., description="Jurisdiction code")
    number: str = Field(..., min_length=1, description="Tenement number")
    type: str = Field("Unknown", description="Tenement type")
    status: str = Field("Unknown", description="Tenement status")
    holder_name: str = Field("Unknown", description="Primary holder name")
    area_ha: Optional[float] = Field(None, description="Area in hectares", ge=0)
    grant_date: Optional[date] = Field(None, description="Grant date")
    application_date: Optional[date] = Field(None, description="Application date")
    expiry_date: Optional[date] = Field(None, description="Expiry date")
    longitude: Optional[float] = Field(None, description="WGS84 longitude", ge=-180, le=180)
    latitude: Optional[float] = Field(None, description="WGS84 latitude", ge=-90, le=90)
    geometry: Optional[Dict[str, Any]] = Field(None, description="Source geometry")
    source_wfs_ref: Optional[str] = Field(None, description="Feature service reference")
    source_mto_ref: Optional[str] = Field(None, description="Bulk run reference")

    @field_validator("jurisdiction", mode="before")
    @classmethod
    def parse_jurisdiction(cls, v: Any) -> Jurisdiction:
        """Accept lower-case codes from callers."""
        return Jurisdiction.parse(v)

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: str) -> str:
        """Reject numbers that are blank once stripped."""
        if not v.strip():
            raise ValueError("tenement number must not be blank")
        return v.strip()

    def has_coordinates(self) -> bool:
        """Check if tenement has a centroid."""
        return self.latitude is not None and self.longitude is not None

    class Config:
        """Pydantic model configuration."""
        str_strip_whitespace = True
        validate_assignment = True
