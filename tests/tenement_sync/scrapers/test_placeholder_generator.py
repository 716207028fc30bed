"""
Tests for PlaceholderGenerator
"""
import pytest
from datetime import date

from src.tenement_sync.models.tenement import Jurisdiction
from src.tenement_sync.scrapers.placeholder_generator import PROFILES, STATUSES, PlaceholderGenerator

REFERENCE_DATE = date(2025, 1, 1)


class TestPlaceholderGenerator:
    """Tests for synthetic tenement generation."""

    def test_profiles_cover_placeholder_jurisdictions(self):
        assert set(PROFILES) == {
            Jurisdiction.NSW, Jurisdiction.VIC, Jurisdiction.NT, Jurisdiction.QLD, Jurisdiction.TAS
        }

    def test_generate_range(self):
        generator = PlaceholderGenerator(PROFILES[Jurisdiction.TAS], target_count=1247)

        records = generator.generate(1, 251)

        assert len(records) == 250
        assert all(r.jurisdiction == Jurisdiction.TAS for r in records)

    def test_generate_capped_at_target(self):
        generator = PlaceholderGenerator(PROFILES[Jurisdiction.NT], target_count=10)

        assert len(generator.generate(1, 100)) == 10
        assert generator.generate(11, 20) == []

    def test_negative_target_rejected(self):
        with pytest.raises(ValueError):
            PlaceholderGenerator(PROFILES[Jurisdiction.NT], target_count=-1)

    def test_numbers_are_stable_between_instances(self):
        first = PlaceholderGenerator(PROFILES[Jurisdiction.NSW], target_count=100)
        second = PlaceholderGenerator(PROFILES[Jurisdiction.NSW], target_count=100)

        assert [first.tenement_number(i) for i in range(1, 101)] == [second.tenement_number(i) for i in range(1, 101)]

    def test_number_format(self):
        generator = PlaceholderGenerator(PROFILES[Jurisdiction.TAS], target_count=10)

        number = generator.tenement_number(5)

        assert number.endswith("1005")
        assert number[:-4] in PROFILES[Jurisdiction.TAS].tenement_types

    def test_numbers_unique_within_run(self):
        generator = PlaceholderGenerator(PROFILES[Jurisdiction.TAS], target_count=1247)

        numbers = [r.number for r in generator.generate(1, 1248)]

        assert len(numbers) == 1247
        assert len(set(numbers)) == 1247

    def test_seed_makes_output_reproducible(self):
        profile = PROFILES[Jurisdiction.VIC]
        first = PlaceholderGenerator(profile, target_count=50, seed=42, reference_date=REFERENCE_DATE)
        second = PlaceholderGenerator(profile, target_count=50, seed=42, reference_date=REFERENCE_DATE)

        assert [r.model_dump() for r in first.generate(1, 51)] == [r.model_dump() for r in second.generate(1, 51)]

    def test_record_fields_within_profile(self):
        profile = PROFILES[Jurisdiction.QLD]
        generator = PlaceholderGenerator(profile, target_count=200, seed=7, reference_date=REFERENCE_DATE)

        for record in generator.generate(1, 201):
            assert profile.latitude_range[0] <= record.latitude <= profile.latitude_range[1]
            assert profile.longitude_range[0] <= record.longitude <= profile.longitude_range[1]
            assert profile.area_range[0] <= record.area_ha <= profile.area_range[1]
            assert record.holder_name in profile.holders
            assert record.status in {s.lower() for s in STATUSES}
            assert record.type == record.number.rstrip("0123456789")
            assert record.geometry["type"] == "Point"

    def test_expiry_only_for_current_titles(self):
        generator = PlaceholderGenerator(PROFILES[Jurisdiction.NSW], target_count=200, seed=3, reference_date=REFERENCE_DATE)

        for record in generator.generate(1, 201):
            if record.status == "current":
                assert record.expiry_date >= REFERENCE_DATE
            else:
                assert record.expiry_date is None
