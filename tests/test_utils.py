"""Tests for id generators and date/time helpers."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from ehrcore.utils.datetime_utils import as_utc, parse_iso_string, parse_search_date, utc_now
from ehrcore.utils.id_generators import generate_fhir_id, generate_schema_name, validate_schema_name


class TestIdGenerators:
    """Tests for external ids and namespace names."""

    def test_fhir_id_is_uuid_text(self):
        value = generate_fhir_id()
        assert str(uuid.UUID(value)) == value

    def test_fhir_ids_do_not_repeat(self):
        assert len({generate_fhir_id() for _ in range(1000)}) == 1000

    def test_schema_name_format(self):
        name = generate_schema_name()
        assert name.startswith("tenant_")
        assert len(name) == len("tenant_") + 8

    def test_schema_name_custom_prefix(self):
        assert generate_schema_name("clinic_").startswith("clinic_")

    @pytest.mark.parametrize("bad", ["", "Tenant_x", "1abc", 'x"; drop', "a" * 64, "tenant-x"])
    def test_invalid_schema_names(self, bad):
        with pytest.raises(ValueError):
            validate_schema_name(bad)


class TestDatetimeUtils:
    """Tests for UTC normalisation and search date parsing."""

    def test_naive_is_treated_as_utc(self):
        assert as_utc(datetime(2024, 1, 1, 12)) == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def test_offset_is_converted(self):
        eastern = timezone(timedelta(hours=-5))
        assert as_utc(datetime(2024, 1, 1, 7, tzinfo=eastern)).hour == 12

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is not None

    def test_parse_iso_z_suffix(self):
        assert parse_iso_string("2024-12-28T10:30:00Z") == datetime(2024, 12, 28, 10, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "value,start,end",
        [
            ("2024", datetime(2024, 1, 1), datetime(2025, 1, 1)),
            ("2024-02", datetime(2024, 2, 1), datetime(2024, 3, 1)),
            ("2024-12", datetime(2024, 12, 1), datetime(2025, 1, 1)),
            ("2024-02-29", datetime(2024, 2, 29), datetime(2024, 3, 1)),
        ],
    )
    def test_search_date_ranges(self, value, start, end):
        assert parse_search_date(value) == (
            start.replace(tzinfo=timezone.utc),
            end.replace(tzinfo=timezone.utc),
        )

    def test_search_date_instant(self):
        start, end = parse_search_date("2024-03-15T10:00:00+02:00")
        assert start == end == datetime(2024, 3, 15, 8, tzinfo=timezone.utc)

    @pytest.mark.parametrize("bad", ["", "yesterday", "2024-13", "2024-02-30", "24"])
    def test_search_date_invalid(self, bad):
        with pytest.raises(ValueError):
            parse_search_date(bad)
