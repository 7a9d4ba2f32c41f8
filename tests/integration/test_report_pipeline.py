"""End-to-end tests: real files on disk through ingestion and KPI summaries."""
import json

import pandas as pd
import pytest

from hofmetrics.common.config_validator import KpiFilter
from hofmetrics.hof_pipeline import run_report
from hofmetrics.ingestion.loader import SourceIngestor
from hofmetrics.models import RecordKind


@pytest.fixture
def operations_csv(tmp_path):
    lines = [
        "Informe History & Forecast;;;;;;;",
        "Fecha;Empresa;HoF;Occ.%;Average Rate;Room Revenue;Total Occ.;House Use;Adl. & Chl.",
        "01/03/2025;Buenos Aires Marriott;History;60,00%;150,00;16.500,00;110;10;180",
        "02/03/2025;Buenos Aires Marriott;History;80,00%;200,00;10.000,00;50;0;90",
        "01/03/2024;Buenos Aires Marriott;History;50,00%;100,00;10.000,00;100;0;150",
        "03/03/2025;Sheraton Bariloche;Forecast;90,00%;300,00;30.000,00;100;0;200",
        ";;;;;;;;",
        "Totales;;;;;;;;",
    ]
    path = tmp_path / "hof_2025.csv"
    path.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return path


@pytest.fixture
def membership_xlsx(tmp_path):
    path = tmp_path / "membresias.xlsx"
    current = pd.DataFrame(
        {
            "Empresa": ["Marriott", "Marriott"],
            "Membresía": ["(GLD) Gold", "(MRD) Member"],
            "Cantidad": [40, 60],
        }
    )
    base = pd.DataFrame(
        {
            "Empresa": ["Marriott", "Marriott"],
            "Membresía": ["Platinum Elite", "Member"],
            "Cantidad": [20, 60],
        }
    )
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        current.to_excel(writer, sheet_name="Socios 2025", index=False)
        base.to_excel(writer, sheet_name="Socios 2024", index=False)
    return path


@pytest.fixture
def nationality_xlsx(tmp_path):
    path = tmp_path / "nacionalidades.xlsx"
    grid = [
        ["Huéspedes por nacionalidad", None, None, None],
        ["Fuente: PMS", None, None, None],
        ["Cantidad", "País", "Fecha", "Continente"],
        [120, "Argentina", "2025-01-10", "America del Sur"],
        [30, "España", "2025-01-11", "Europa"],
        [50, "Brasil", "2025-02-01", "AMERICA"],
        [0, "Japón", "2025-02-03", "Asia"],
        [10, "Desconocido", "2025-02-04", None],
    ]
    pd.DataFrame(grid).to_excel(path, sheet_name="Data", index=False, header=False)
    return path


@pytest.mark.asyncio
async def test_operational_report(operations_csv):
    flt = KpiFilter(year=2025, hotel="MARRIOTT")
    report = await run_report(operations_csv, RecordKind.OPERATIONAL_DAY, flt)

    assert report["ingestion"]["status"] == "ok"
    assert report["ingestion"]["records"] == 4
    assert report["ingestion"]["rejections"] == {"missing_date": 1}
    kpis = report["kpis"]
    assert kpis["years"] == [2024, 2025]
    assert kpis["hotels"] == ["MARRIOTT", "SHERATON BCR"]
    current = kpis["comparison"]["current"]
    assert current["occupancy"] == pytest.approx(0.6667, abs=1e-4)
    assert current["revenue"] == pytest.approx(26500.0)
    assert kpis["comparison"]["deltas"]["revenue"]["change"] == pytest.approx(1.65)
    assert kpis["monthly"]["compared_months"] == [3]
    json.dumps(report)


@pytest.mark.asyncio
async def test_operational_report_forecast_only(operations_csv):
    report = await run_report(operations_csv, RecordKind.OPERATIONAL_DAY, KpiFilter(year=2025, hof="Forecast"))
    current = report["kpis"]["comparison"]["current"]
    assert current["occupancy"] == pytest.approx(0.9)
    assert report["kpis"]["comparison"]["deltas"]["occupancy"]["no_base"] is True


@pytest.mark.asyncio
async def test_membership_report_uses_sheet_years(membership_xlsx):
    report = await run_report(membership_xlsx, RecordKind.MEMBERSHIP, KpiFilter(year=2025))

    assert report["ingestion"]["sheet_names"] == ["Socios 2025", "Socios 2024"]
    mix = report["kpis"]["elite_mix"]
    assert mix["current_share"] == pytest.approx(0.4)
    assert mix["base_share"] == pytest.approx(0.25)
    assert mix["delta"]["change"] == pytest.approx(15.0)
    assert mix["delta"]["kind"] == "points"


@pytest.mark.asyncio
async def test_membership_report_single_sheet(membership_xlsx):
    report = await run_report(membership_xlsx, RecordKind.MEMBERSHIP, KpiFilter(year=2025), sheet="Socios 2024")
    assert report["kpis"]["years"] == [2024]
    assert report["kpis"]["elite_mix"]["current_total"] == 0


@pytest.mark.asyncio
async def test_nationality_report(nationality_xlsx):
    report = await run_report(nationality_xlsx, RecordKind.NATIONALITY, KpiFilter(year=2025))

    kpis = report["kpis"]
    assert kpis["total_guests"] == pytest.approx(210.0)
    assert [c["label"] for c in kpis["countries"]] == ["Argentina", "Brasil", "España", "Desconocido"]
    continents = {c["label"]: c["value"] for c in kpis["continents"]}
    assert continents == {"América": 170.0, "Europa": 30.0, "Sin dato": 10.0}


@pytest.mark.asyncio
async def test_unreadable_and_empty_reports(tmp_path):
    missing = await run_report(tmp_path / "nope.csv", RecordKind.OPERATIONAL_DAY, KpiFilter(year=2025))
    assert missing["ingestion"]["status"] == "unreadable"
    assert missing["kpis"] is None

    empty_path = tmp_path / "empty.csv"
    empty_path.write_text("Fecha,Empresa,Occ.%\n", encoding="utf-8")
    empty = await run_report(empty_path, RecordKind.OPERATIONAL_DAY, KpiFilter(year=2025))
    assert empty["ingestion"]["status"] == "empty"
    assert empty["kpis"] is None


@pytest.mark.asyncio
async def test_shared_ingestor_reuses_cache(operations_csv):
    ingestor = SourceIngestor()
    await run_report(operations_csv, RecordKind.OPERATIONAL_DAY, KpiFilter(year=2025), ingestor=ingestor)
    operations_csv.write_text("garbage", encoding="utf-8")
    cached = await run_report(operations_csv, RecordKind.OPERATIONAL_DAY, KpiFilter(year=2024), ingestor=ingestor)
    assert cached["ingestion"]["records"] == 4
    assert cached["kpis"]["comparison"]["current"]["occupancy"] == pytest.approx(0.5)


@pytest.mark.asyncio
async def test_default_filter_reports_every_hotel(operations_csv):
    report = await run_report(operations_csv, RecordKind.OPERATIONAL_DAY, KpiFilter(year=2025))

    assert report["filter"]["hotel"] == "ALL"
    current = report["kpis"]["comparison"]["current"]
    assert current["occupancy"] == pytest.approx(0.76)
    assert current["revenue"] == pytest.approx(56500.0)
    assert current["days"] == 3
    assert [m["label"] for m in report["kpis"]["month_ranking"]] == ["Marzo"]


@pytest.mark.asyncio
async def test_rank_metric_reaches_weekday_ranking(operations_csv):
    report = await run_report(operations_csv, RecordKind.OPERATIONAL_DAY, KpiFilter(year=2025), rank_metric="average_rate")

    weekdays = report["kpis"]["weekday_ranking"]
    assert weekdays[0]["label"] == "Lunes"
    assert weekdays[0]["value"] == pytest.approx(300.0)
