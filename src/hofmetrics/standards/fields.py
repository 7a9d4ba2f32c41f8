"""Canonical field names and their header synonyms per record kind.

Synonyms are listed in priority order and written in their normalized form
(trimmed, uppercased, without diacritics) so they compare directly against
normalized headers. Resolution tries every synonym as an exact match before
falling back to containment; synonyms listed in ``exact_only`` never match by
containment.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

from ..models import RecordKind
from .naming import normalize_header


@dataclass(frozen=True)
class FieldSpec:
    name: str
    synonyms: Tuple[str, ...]
    # matched only against whole headers
    exact_only: Tuple[str, ...] = ()

    @property
    def containment_synonyms(self) -> Tuple[str, ...]:
        return tuple(s for s in self.synonyms if s not in self.exact_only)


@dataclass(frozen=True)
class RecordSchema:
    kind: RecordKind
    fields: Tuple[FieldSpec, ...]
    required: Tuple[str, ...]

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


OPERATIONAL_DAY = RecordSchema(
    kind=RecordKind.OPERATIONAL_DAY,
    fields=(
        FieldSpec("date", ("FECHA", "DATE", "DIA"), exact_only=("DIA",)),
        FieldSpec("hotel", ("EMPRESA", "HOTEL", "PROPERTY", "PROPIEDAD")),
        FieldSpec("hof", ("HOF", "H&F", "HISTORY/FORECAST", "HISTORY FORECAST")),
        FieldSpec("occupancy", ("OCC.%", "OCC %", "OCC%", "% OCC", "OCUPACION", "OCUPACION %", "OCCUPANCY")),
        FieldSpec("average_rate", ("AVERAGE RATE", "AVERAGERATE", "ADR", "AVG RATE", "TARIFA PROMEDIO")),
        FieldSpec("room_revenue", ("ROOM REVENUE", "ROOMREVENUE", "ROOMS REVENUE", "INGRESO HABITACIONES", "REVENUE")),
        FieldSpec("total_occupied_rooms", ("TOTAL OCC.", "TOTAL OCC", "TOTALOCC", "ROOMS OCCUPIED", "OCC ROOMS")),
        FieldSpec("house_use_rooms", ("HOUSE USE", "HOUSEUSE", "USO DE CASA")),
        FieldSpec("persons_in_house", ("ADL. & CHL.", "ADL & CHL", "ADLCHL", "PERSONS IN HOUSE", "PERSONAS", "GUESTS", "HUESPEDES")),
        FieldSpec("weekday", ("DOW", "DAY OF WEEK", "DIA DE LA SEMANA", "WEEKDAY")),
    ),
    required=("date", "hotel"),
)

MEMBERSHIP = RecordSchema(
    kind=RecordKind.MEMBERSHIP,
    fields=(
        FieldSpec("date", ("FECHA", "DATE", "DIA", "PERIODO"), exact_only=("DIA",)),
        FieldSpec("year", ("ANO", "ANIO", "YEAR")),
        FieldSpec("hotel", ("EMPRESA", "HOTEL", "PROPERTY", "UNIDAD", "ESTABLECIMIENTO")),
        FieldSpec("tier", ("BONVOY", "BONBOY", "BOMBOY", "MEMBERSHIP", "MEMBRESIA", "TIER", "LEVEL", "CATEGORIA", "SEGMENTO")),
        FieldSpec("count", ("CANTIDAD", "QTY", "COUNT", "MEMBERS", "MIEMBROS", "SOCIOS", "CANTIDAD TOTAL", "TOTAL")),
    ),
    required=("hotel", "tier"),
)

NATIONALITY = RecordSchema(
    kind=RecordKind.NATIONALITY,
    fields=(
        FieldSpec("date", ("FECHA", "DATE", "DIA"), exact_only=("DIA",)),
        FieldSpec("year", ("ANO", "ANIO", "YEAR")),
        FieldSpec("country", ("PAIS", "NACIONALIDAD", "COUNTRY", "NATIONALITY")),
        FieldSpec("continent", ("CONTINENTE", "CONTINENT")),
        FieldSpec("count", ("CANTIDAD", "QTY", "PAX", "HUESPEDES", "GUESTS", "IMPORTE", "CANTIDAD PAX")),
        FieldSpec("hotel", ("EMPRESA", "HOTEL")),
    ),
    required=("country",),
)

SCHEMAS: Dict[RecordKind, RecordSchema] = {
    RecordKind.OPERATIONAL_DAY: OPERATIONAL_DAY,
    RecordKind.MEMBERSHIP: MEMBERSHIP,
    RecordKind.NATIONALITY: NATIONALITY,
}


def schema_for(kind: RecordKind, extra_aliases: Mapping[str, Sequence[str]] | None = None) -> RecordSchema:
    """Return the schema for ``kind`` with configured aliases appended.

    ``extra_aliases`` maps canonical field name -> additional synonyms; they
    are tried after the built-in ones. Unknown field names are ignored.
    """
    base = SCHEMAS[kind]
    if not extra_aliases:
        return base
    fields = []
    for spec in base.fields:
        extra = tuple(normalize_header(a) for a in extra_aliases.get(spec.name, ()) if normalize_header(a))
        fields.append(FieldSpec(spec.name, spec.synonyms + tuple(a for a in extra if a not in spec.synonyms), spec.exact_only))
    return RecordSchema(kind=base.kind, fields=tuple(fields), required=base.required)
