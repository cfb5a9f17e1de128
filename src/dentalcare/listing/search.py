"""Per-entity search and sort declarations.

Search predicates are plain SQLAlchemy expressions: the search text is always
a bound parameter, and LIKE wildcards in it are escaped so ``%`` and ``_``
match literally.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import ColumnElement, String, cast, or_, true
from sqlalchemy.orm import InstrumentedAttribute

from dentalcare import models


class MatchMode(str, Enum):
    TEXT = "text"              # case-insensitive containment
    EXACT = "exact"            # case-sensitive containment (phone numbers)
    IDENTIFIER = "identifier"  # numeric key cast to text, then containment


@dataclass(frozen=True)
class SearchField:
    column: InstrumentedAttribute
    mode: MatchMode = MatchMode.TEXT

    def matches(self, text: str) -> ColumnElement[bool]:
        if self.mode is MatchMode.IDENTIFIER:
            return cast(self.column, String).contains(text, autoescape=True)
        if self.mode is MatchMode.EXACT:
            return self.column.contains(text, autoescape=True)
        return self.column.icontains(text, autoescape=True)


@dataclass(frozen=True)
class EntitySpec:
    name: str
    model: type[models.Base]
    natural_key: InstrumentedAttribute
    search_fields: tuple[SearchField, ...]
    sortable: dict[str, InstrumentedAttribute] = field(default_factory=dict)

    def sort_column(self, sort_field: str) -> InstrumentedAttribute:
        """Resolve a client sort field; unknown names fall back to the natural key."""
        return self.sortable.get(sort_field, self.natural_key)


def build_search_predicate(spec: EntitySpec, search_text: str) -> ColumnElement[bool]:
    """OR of every declared field match; unconditionally true for empty text."""
    if search_text == "":
        return true()
    return or_(*(f.matches(search_text) for f in spec.search_fields))


def _sortable(*columns: InstrumentedAttribute) -> dict[str, InstrumentedAttribute]:
    """Index columns by attribute name and by their camelCase wire name."""
    out: dict[str, InstrumentedAttribute] = {}
    for col in columns:
        head, *rest = col.key.split("_")
        out[col.key] = col
        out[head + "".join(part.title() for part in rest)] = col
    return out


P, A, M, U = models.Patient, models.Appointment, models.Medicine, models.User

PATIENTS = EntitySpec(
    name="patients",
    model=P,
    natural_key=P.id,
    search_fields=(
        SearchField(P.first_name),
        SearchField(P.last_name),
        SearchField(P.email),
        SearchField(P.phone, MatchMode.EXACT),
        SearchField(P.id, MatchMode.IDENTIFIER),
    ),
    sortable=_sortable(
        P.id, P.first_name, P.last_name, P.email, P.phone,
        P.date_of_birth, P.last_visit, P.created_at,
    ),
)

APPOINTMENTS = EntitySpec(
    name="appointments",
    model=A,
    natural_key=A.id,
    search_fields=(
        SearchField(A.patient_name),
        SearchField(A.dentist_name),
        SearchField(A.type),
        SearchField(A.status),
        SearchField(A.id, MatchMode.IDENTIFIER),
    ),
    sortable=_sortable(
        A.id, A.patient_id, A.patient_name, A.dentist_name, A.date,
        A.start_time, A.end_time, A.type, A.status, A.treatment_type, A.created_at,
    ),
)

MEDICINES = EntitySpec(
    name="medicines",
    model=M,
    natural_key=M.id,
    search_fields=(
        SearchField(M.name),
        SearchField(M.category),
        SearchField(M.manufacturer),
        SearchField(M.id, MatchMode.IDENTIFIER),
    ),
    sortable=_sortable(
        M.id, M.name, M.category, M.manufacturer, M.stock_quantity,
        M.unit_price, M.expiry_date, M.created_at,
    ),
)

USERS = EntitySpec(
    name="users",
    model=U,
    natural_key=U.id,
    search_fields=(
        SearchField(U.name),
        SearchField(U.email),
        SearchField(U.role),
    ),
    sortable=_sortable(U.id, U.name, U.email, U.role, U.created_at),
)

ENTITY_SPECS: dict[str, EntitySpec] = {
    spec.name: spec for spec in (PATIENTS, APPOINTMENTS, MEDICINES, USERS)
}
