"""Unit tests for typed record builders."""
from datetime import date

import pytest

from hofmetrics.ingestion.header_resolver import resolve_headers
from hofmetrics.ingestion.records import (
    REASON_MISSING_COUNTRY,
    REASON_MISSING_DATE,
    REASON_MISSING_HOTEL,
    REASON_MISSING_TIER,
    REASON_MISSING_YEAR,
    build_record,
)
from hofmetrics.models import (
    HofFlag,
    MembershipRecord,
    NationalityRecord,
    OperationalDayRecord,
    RecordKind,
    RowRejection,
)
from hofmetrics.standards.fields import MEMBERSHIP, NATIONALITY, OPERATIONAL_DAY

OPS_HEADER = ["Fecha", "Empresa", "HoF", "Occ.%", "Average Rate", "Room Revenue", "Total Occ.", "House Use", "Adl. & Chl.", "DOW"]


def _ops(row):
    resolution = resolve_headers([OPS_HEADER], OPERATIONAL_DAY)
    return build_record(RecordKind.OPERATIONAL_DAY, row, resolution, row_number=2)


def test_operational_day_record():
    record = _ops(["01-06-25 Sun", "Buenos Aires Marriott", "History", "59,40%", "$ 120,50", "5.251.930,33", "120", "20", "180", "Dom"])
    assert isinstance(record, OperationalDayRecord)
    assert record.date == date(2025, 6, 1)
    assert record.hotel == "MARRIOTT"
    assert record.hof is HofFlag.HISTORY
    assert record.occupancy == pytest.approx(0.594)
    assert record.average_rate == pytest.approx(120.5)
    assert record.room_revenue == pytest.approx(5251930.33)
    assert record.weight == 100
    assert record.persons_in_house == 180
    assert record.weekday == "Domingo"


def test_operational_day_weekday_derived_from_date():
    record = _ops([45809, "Maitei", "", "0,8", "", "", "10", "", "", ""])
    assert record.date == date(2025, 6, 1)
    assert record.weekday == "Domingo"
    assert record.hof is HofFlag.UNKNOWN
    assert record.occupancy == pytest.approx(0.8)


def test_operational_day_occupancy_clamped_and_weight_floor():
    record = _ops(["2025-01-01", "Maitei", "F", "140", "100", "-5", "3", "8", "1", ""])
    assert record.occupancy == 1.0
    assert record.room_revenue == 0.0
    assert record.weight == 0


@pytest.mark.parametrize(
    "row, reason",
    [
        (["Total", "Marriott", "", "", "", "", "", "", "", ""], REASON_MISSING_DATE),
        (["2025-01-01", "", "", "", "", "", "", "", "", ""], REASON_MISSING_HOTEL),
    ],
)
def test_operational_day_rejections(row, reason):
    outcome = _ops(row)
    assert isinstance(outcome, RowRejection)
    assert outcome.reason == reason
    assert outcome.row_number == 2


def test_short_rows_are_tolerated():
    record = _ops(["2025-02-03", "Sheraton Bariloche"])
    assert isinstance(record, OperationalDayRecord)
    assert record.hotel == "SHERATON BCR"
    assert record.weight == 0


def _membership(header, row, table=""):
    resolution = resolve_headers([header], MEMBERSHIP)
    return build_record(RecordKind.MEMBERSHIP, row, resolution, row_number=5, table=table)


def test_membership_year_from_date_then_year_column():
    header = ["Fecha", "Año", "Empresa", "Bonvoy", "Cantidad"]
    dated = _membership(header, ["2025-03-01", "2024", "Marriott", "(GLD) Gold", "40"])
    assert isinstance(dated, MembershipRecord)
    assert dated.year == 2025
    assert dated.month == 3
    assert dated.count == 40

    yearly = _membership(header, ["", "2024", "Marriott", "(MRD) Member", "60"])
    assert yearly.year == 2024
    assert yearly.date is None


def test_membership_year_falls_back_to_sheet_name():
    header = ["Empresa", "Bonvoy", "Cantidad"]
    record = _membership(header, ["Sheraton MDQ", "Silver Elite", "12"], table="Socios 2023")
    assert record.year == 2023
    assert record.hotel == "SHERATON MDQ"

    rejected = _membership(header, ["Sheraton MDQ", "Silver Elite", "12"], table="Hoja1")
    assert isinstance(rejected, RowRejection)
    assert rejected.reason == REASON_MISSING_YEAR


def test_membership_record_keeps_raw_tier_label():
    record = _membership(["Año", "Empresa", "Bonvoy", "Cantidad"], ["2025", "Marriott", "(GLD) Gold", "40"])
    assert record == MembershipRecord(year=2025, hotel="MARRIOTT", tier="(GLD) Gold", count=40)


def test_membership_requires_hotel_and_tier():
    header = ["Año", "Empresa", "Bonvoy", "Cantidad"]
    assert _membership(header, ["2025", "", "Gold", "1"]).reason == REASON_MISSING_HOTEL
    assert _membership(header, ["2025", "Maitei", "", "1"]).reason == REASON_MISSING_TIER


def _nationality(row, table=""):
    resolution = resolve_headers([["País", "Continente", "Cantidad", "Fecha"]], NATIONALITY)
    return build_record(RecordKind.NATIONALITY, row, resolution, row_number=3, table=table)


def test_nationality_record():
    record = _nationality(["Brasil", "America del Sur", "1250", "15/02/2025"])
    assert isinstance(record, NationalityRecord)
    assert record.year == 2025
    assert record.continent == "América"
    assert record.count == 1250.0
    assert record.hotel == ""


def test_nationality_empty_continent_and_rejections():
    record = _nationality(["Japón", "", "4", "2024-08-01"])
    assert record.continent == "Sin dato"
    assert _nationality(["", "Asia", "4", "2024-08-01"]).reason == REASON_MISSING_COUNTRY
    assert _nationality(["Chile", "America", "4", ""]).reason == REASON_MISSING_YEAR
    assert _nationality(["Chile", "America", "4", ""], table="Nacionalidades 2022").year == 2022
