"""
Placeholder Tenement Generator

NSW, VIC, NT, QLD and TAS have no live integration yet. Until they do, each
is represented by a generator that produces plausible tenement records from
a per-jurisdiction profile of title types, holders and bounding box.

Identity is stable: record ``i`` always gets the same type prefix and number,
so repeated syncs overwrite the same rows. Descriptive fields are random
unless a seed is given, in which case the whole output is reproducible.
"""
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from src.tenement_sync.models.tenement import Jurisdiction, TenementRecord
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)

STATUSES = ("Current", "Pending", "Expired", "Cancelled")
MAX_EXPIRY_DAYS = 365 * 5


@dataclass(frozen=True)
class JurisdictionProfile:
    """
    Shape of a jurisdiction's tenement register.

    Attributes:
        jurisdiction: Jurisdiction code
        source_name: Name of the register the placeholder stands in for
        source_url: Public URL of that register
        tenement_types: Title type prefixes
        holders: Plausible holder names
        number_offset: Added to the record index to form the title number
        latitude_range: (min, max) latitude of the bounding box
        longitude_range: (min, max) longitude of the bounding box
        area_range: (min, max) area in hectares
    """
    jurisdiction: Jurisdiction
    source_name: str
    source_url: str
    tenement_types: Tuple[str, ...]
    holders: Tuple[str, ...]
    number_offset: int
    latitude_range: Tuple[float, float]
    longitude_range: Tuple[float, float]
    area_range: Tuple[int, int]


PROFILES: Dict[Jurisdiction, JurisdictionProfile] = {
    Jurisdiction.NSW: JurisdictionProfile(
        jurisdiction=Jurisdiction.NSW,
        source_name="NSW Titles",
        source_url="https://www.resourcesregulator.nsw.gov.au/",
        tenement_types=("EL", "ML", "PL", "CL", "AL"),
        holders=(
            "BHP Billiton Limited", "Rio Tinto Limited", "Glencore Coal Assets Australia",
            "Whitehaven Coal Limited", "Yancoal Australia Limited", "Centennial Coal Company",
            "Peabody Energy Australia", "Anglo American Metallurgical Coal",
            "NSW Mining Exploration Pty Ltd", "Hunter Valley Coal Company",
            "Idemitsu Australia Resources", "Donaldson Coal Pty Ltd",
        ),
        number_offset=8000,
        latitude_range=(-37.5, -28.2),
        longitude_range=(140.9, 153.6),
        area_range=(100, 8099),
    ),
    Jurisdiction.VIC: JurisdictionProfile(
        jurisdiction=Jurisdiction.VIC,
        source_name="VIC EarthRes",
        source_url="https://earthresources.vic.gov.au/",
        tenement_types=("EL", "ML", "PL", "RL", "MIN"),
        holders=(
            "Newcrest Mining Limited", "Evolution Mining Limited", "Kirkland Lake Gold",
            "Northern Star Resources", "Regis Resources Limited", "St Barbara Limited",
            "Mandalay Resources Corporation", "Catalyst Metals Limited",
            "VIC Mining Exploration Pty Ltd", "Golden Point Resources",
            "Fosterville South Exploration", "Bendigo Mining NL",
        ),
        number_offset=5000,
        latitude_range=(-39.2, -33.9),
        longitude_range=(140.9, 149.9),
        area_range=(50, 5049),
    ),
    Jurisdiction.NT: JurisdictionProfile(
        jurisdiction=Jurisdiction.NT,
        source_name="NT Strike",
        source_url="http://strike.nt.gov.au",
        tenement_types=("EL", "ML", "PL", "MPL", "ELR"),
        holders=(
            "Core Lithium Ltd", "Territory Resources Limited", "Arafura Resources Limited",
            "TNG Limited", "Northern Minerals Limited", "Rum Jungle Resources Ltd",
            "NT Mining Corporation", "Alara Resources Limited", "Todd Corporation",
            "Vista Gold Australia Pty Ltd", "Emmerson Resources Limited",
            "Northern Territory Exploration Pty Ltd",
        ),
        number_offset=30000,
        latitude_range=(-26.0, -10.9),
        longitude_range=(129.0, 138.0),
        area_range=(200, 15199),
    ),
    Jurisdiction.QLD: JurisdictionProfile(
        jurisdiction=Jurisdiction.QLD,
        source_name="QLD MyMinesOnline",
        source_url="https://www.business.qld.gov.au/industries/mining-energy-water/resources/minerals-coal/online-services/myminesonline",
        tenement_types=("EPM", "ML", "MDL", "PL", "ATP"),
        holders=(
            "BHP Billiton Mitsubishi Alliance", "Glencore Coal Queensland",
            "Anglo American Metallurgical Coal", "Peabody Energy Australia",
            "Yancoal Australia Limited", "Whitehaven Coal Limited",
            "New Hope Corporation Limited", "Stanmore Resources Limited",
            "Coronado Global Resources", "Jellinbah Group",
            "QLD Mining Exploration Pty Ltd", "Bowen Coking Coal Limited",
        ),
        number_offset=25000,
        latitude_range=(-29.0, -10.4),
        longitude_range=(137.9, 153.6),
        area_range=(150, 12149),
    ),
    Jurisdiction.TAS: JurisdictionProfile(
        jurisdiction=Jurisdiction.TAS,
        source_name="TAS Mineral Resources Tasmania",
        source_url="https://www.mrt.tas.gov.au/products/online_services/web_services",
        tenement_types=("EL", "ML", "PL", "RL", "SML"),
        holders=(
            "MMG Limited", "Venture Minerals Limited", "Bass Metals Ltd",
            "Stellar Resources Limited", "Renison Consolidated Mines",
            "TAS Mining Corporation", "Metals X Limited", "Zeehan Zinc Pty Ltd",
            "Tasmania Mines Limited", "King Island Tungsten",
            "Beaconsfield Gold NL", "Consolidated Tin Mines",
        ),
        number_offset=1000,
        latitude_range=(-43.6, -39.6),
        longitude_range=(143.8, 148.4),
        area_range=(25, 3024),
    ),
}


class PlaceholderGenerator:
    """Generates ``target_count`` placeholder tenements for one jurisdiction."""

    def __init__(
        self,
        profile: JurisdictionProfile,
        target_count: int,
        seed: Optional[int] = None,
        reference_date: Optional[date] = None,
    ):
        if target_count < 0:
            raise ValueError("target_count must not be negative")

        self.profile = profile
        self.target_count = target_count
        self.seed = seed
        self.reference_date = reference_date
        self._rng = random.Random()
        logger.info(
            "placeholder_generator_initialized",
            jurisdiction=profile.jurisdiction.value,
            target_count=target_count,
            seeded=seed is not None,
        )

    @property
    def jurisdiction(self) -> Jurisdiction:
        return self.profile.jurisdiction

    def tenement_number(self, index: int) -> str:
        """
        Title number for the 1-based record ``index``.

        The type prefix is drawn from a generator seeded by jurisdiction and
        index alone, so it never changes between runs.
        """
        identity_rng = random.Random(f"{self.profile.jurisdiction.value}-{index}")
        tenement_type = identity_rng.choice(self.profile.tenement_types)
        return f"{tenement_type}{self.profile.number_offset + index}"

    def generate(self, start: int, stop: int) -> List[TenementRecord]:
        """
        Generate records for 1-based indices in ``[start, stop)``, bounded by target_count.

        Args:
            start: First index (>= 1)
            stop: One past the last index

        Returns:
            List of TenementRecord
        """
        start = max(start, 1)
        stop = min(stop, self.target_count + 1)
        today = self.reference_date or date.today()
        return [self._make_record(index, today) for index in range(start, stop)]

    def _make_record(self, index: int, today: date) -> TenementRecord:
        if self.seed is not None:
            rng = random.Random(f"{self.seed}-{self.profile.jurisdiction.value}-{index}")
        else:
            rng = self._rng

        number = self.tenement_number(index)
        tenement_type = number.rstrip("0123456789")
        status = rng.choice(STATUSES)
        latitude = rng.uniform(*self.profile.latitude_range)
        longitude = rng.uniform(*self.profile.longitude_range)

        expiry_date = None
        if status == "Current":
            expiry_date = today + timedelta(days=rng.randint(0, MAX_EXPIRY_DAYS))

        return TenementRecord(
            jurisdiction=self.profile.jurisdiction,
            number=number,
            type=tenement_type,
            status=status.lower(),
            holder_name=rng.choice(self.profile.holders),
            area_ha=float(rng.randint(*self.profile.area_range)),
            expiry_date=expiry_date,
            longitude=round(longitude, 6),
            latitude=round(latitude, 6),
            geometry={"type": "Point", "coordinates": [round(longitude, 6), round(latitude, 6)]},
        )
