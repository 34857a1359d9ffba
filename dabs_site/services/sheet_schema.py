"""Header-driven projection of spreadsheet rows into named fields.

A tab's first row names its columns. Each field is located by name (ignoring
case, spacing and punctuation, with a few aliases) instead of by position, so
reordering columns upstream does not shift data between fields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

from dabs_site.services.exceptions import SchemaMismatchError

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_header(value: str) -> str:
    return _NON_ALNUM.sub("", value.strip().lower())


@dataclass(frozen=True)
class ColumnSpec:
    field: str
    aliases: Sequence[str] = ()
    required: bool = True

    def names(self) -> List[str]:
        return [normalize_header(name) for name in (self.field, *self.aliases)]


@dataclass
class SheetSchema:
    name: str
    columns: Sequence[ColumnSpec]

    def bind(self, header: Sequence[str]) -> "BoundSchema":
        """Resolve column positions from ``header`` or raise ``SchemaMismatchError``."""

        positions: Dict[str, int] = {}
        for position, cell in enumerate(header):
            key = normalize_header(cell)
            if key and key not in positions:
                positions[key] = position

        resolved: Dict[str, int] = {}
        missing: List[str] = []
        for column in self.columns:
            position = next(
                (positions[name] for name in column.names() if name in positions),
                None,
            )
            if position is None:
                if column.required:
                    missing.append(column.field)
                continue
            resolved[column.field] = position

        if missing:
            raise SchemaMismatchError(
                f"{self.name} sheet is missing columns: {', '.join(missing)}",
                missing=missing,
            )
        return BoundSchema(self, resolved)


@dataclass(frozen=True)
class BoundSchema:
    schema: SheetSchema
    positions: Mapping[str, int]

    def project(self, row: Sequence[str]) -> Dict[str, str]:
        record: Dict[str, str] = {}
        for column in self.schema.columns:
            position = self.positions.get(column.field)
            if position is None or position >= len(row):
                record[column.field] = ""
            else:
                record[column.field] = str(row[position]).strip()
        return record

    def project_all(self, rows: Iterable[Sequence[str]]) -> List[Dict[str, str]]:
        return [self.project(row) for row in rows if any(str(cell).strip() for cell in row)]


STORE_SCHEMA = SheetSchema(
    name="Stores",
    columns=(
        ColumnSpec("state"),
        ColumnSpec("name", aliases=("store", "store name")),
        ColumnSpec("address", aliases=("street",)),
        ColumnSpec("city"),
        ColumnSpec("zip", aliases=("zip code", "postal code", "zipcode")),
        ColumnSpec("phone", aliases=("phone number",), required=False),
        ColumnSpec("lat", aliases=("latitude",)),
        ColumnSpec("lng", aliases=("longitude", "lon", "long")),
    ),
)

REQUEST_SCHEMA = SheetSchema(
    name="ProductRequests",
    columns=(
        ColumnSpec("timestamp"),
        ColumnSpec("city"),
        ColumnSpec("store"),
        ColumnSpec("product"),
        ColumnSpec("email", required=False),
        ColumnSpec("instagram", aliases=("ig", "instagram handle"), required=False),
        ColumnSpec("date", required=False),
        ColumnSpec("status", required=False),
    ),
)
