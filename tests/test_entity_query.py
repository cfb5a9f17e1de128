"""
EntityListQuery against a real (SQLite) store:
search predicates, sorting, paging windows, typeahead cap and lookups.
"""
from __future__ import annotations

import datetime as dt

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.sql.elements import True_

from dentalcare.core.errors import NotFoundError
from dentalcare.listing import (
    ENTITY_SPECS,
    EntityListQuery,
    PageQuery,
    build_search_predicate,
    month_bounds,
    week_bounds,
)
from factories import appointment, medicine, patient, user


async def _list(session_factory, entity, **raw):
    async with session_factory() as session:
        return await EntityListQuery(session).execute(entity, PageQuery.normalize(**raw))


# ---------------------------------------------------------------------------
# Search predicates
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_empty_search_returns_every_row(session_factory, seed):
    await seed(*(patient(f"P{i}", "Doe", email=None, phone=None) for i in range(7)))

    page = await _list(session_factory, "patients", search="", size=100)

    assert page.total_elements == 7
    assert len(page.items) == 7


@pytest.mark.asyncio
async def test_search_smith_matches_only_smith(session_factory, seed):
    await seed(patient("John", "Smith"), patient("Anne", "Lee"))

    page = await _list(session_factory, "patients", search="smith")

    assert page.total_elements == 1
    assert [(p.first_name, p.last_name) for p in page.items] == [("John", "Smith")]


@pytest.mark.asyncio
async def test_search_is_case_insensitive_across_text_fields(session_factory, seed):
    await seed(
        patient("Maria", "Garcia", email="mg@Dental.example"),
        patient("Tom", "Baker", email="tom@other.example"),
    )

    by_first = await _list(session_factory, "patients", search="MARIA")
    by_email = await _list(session_factory, "patients", search="dental.EXAMPLE")

    assert [p.first_name for p in by_first.items] == ["Maria"]
    assert [p.first_name for p in by_email.items] == ["Maria"]


@pytest.mark.asyncio
async def test_search_matches_phone_substring(session_factory, seed):
    await seed(patient("A", "One", phone="+49 170 1234567"), patient("B", "Two", phone="+33 6 000000"))

    page = await _list(session_factory, "patients", search="1234")

    assert [p.first_name for p in page.items] == ["A"]


@pytest.mark.asyncio
async def test_search_matches_identifier_cast_to_text(session_factory, seed):
    rows = await seed(*(patient(f"N{i}", "Zed", email=None, phone=None) for i in range(12)))
    twelfth = rows[11]
    assert twelfth.id == 12

    page = await _list(session_factory, "patients", search="12", size=100)

    assert [p.id for p in page.items] == [12]


@pytest.mark.asyncio
async def test_appointment_search_fields(session_factory, seed):
    day = dt.date(2024, 3, 1)
    await seed(
        appointment(day, patient_name="Carl Jung", dentist_name="Dr. Who", type="cleaning", status="completed"),
        appointment(day, patient_name="Ada Byron", dentist_name="Dr. Strange", type="extraction", status="scheduled"),
    )

    assert [a.patient_name for a in (await _list(session_factory, "appointments", search="jung")).items] == ["Carl Jung"]
    assert [a.patient_name for a in (await _list(session_factory, "appointments", search="strange")).items] == ["Ada Byron"]
    assert [a.patient_name for a in (await _list(session_factory, "appointments", search="CLEAN")).items] == ["Carl Jung"]
    assert [a.patient_name for a in (await _list(session_factory, "appointments", search="complet")).items] == ["Carl Jung"]


@pytest.mark.asyncio
async def test_user_search_fields(session_factory, seed):
    await seed(
        user("Alice Admin", role="admin", email="alice@clinic.test"),
        user("Bob Dentist", role="dentist", email="bob@clinic.test"),
    )

    assert [u.name for u in (await _list(session_factory, "users", search="DENTIST")).items] == ["Bob Dentist"]
    assert [u.name for u in (await _list(session_factory, "users", search="alice@")).items] == ["Alice Admin"]


@pytest.mark.asyncio
async def test_search_wildcards_match_literally(session_factory, seed):
    await seed(medicine("Ibuprofen 5%"), medicine("Paracetamol"), medicine("Lido_caine"))

    percent = await _list(session_factory, "medicines", search="%")
    underscore = await _list(session_factory, "medicines", search="_")

    assert [m.name for m in percent.items] == ["Ibuprofen 5%"]
    assert [m.name for m in underscore.items] == ["Lido_caine"]


@pytest.mark.asyncio
async def test_search_text_is_bound_not_interpolated(session_factory, seed):
    await seed(patient("Robert", "Tables"))

    page = await _list(session_factory, "patients", search="'; DROP TABLE patients; --")

    assert page.total_elements == 0
    assert (await _list(session_factory, "patients")).total_elements == 1


def test_predicate_for_empty_text_is_unconditional():
    spec = ENTITY_SPECS["patients"]
    assert isinstance(build_search_predicate(spec, ""), True_)
    assert "smith" not in str(build_search_predicate(spec, "smith"))


# ---------------------------------------------------------------------------
# Sorting and paging
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_sort_by_camel_case_field_descending(session_factory, seed):
    await seed(patient("A", "Brown"), patient("B", "Adams"), patient("C", "Clark"))

    page = await _list(session_factory, "patients", sort_by="lastName", sort_direction="DESC")

    assert [p.last_name for p in page.items] == ["Clark", "Brown", "Adams"]


@pytest.mark.asyncio
async def test_unknown_sort_field_falls_back_to_natural_key(session_factory, seed):
    await seed(patient("C", "Z"), patient("A", "Y"), patient("B", "X"))

    page = await _list(session_factory, "patients", sort_by="password; --", sort_direction="desc")

    assert [p.id for p in page.items] == [3, 2, 1]


@pytest.mark.asyncio
async def test_paging_window_and_total(session_factory, seed):
    await seed(*(medicine(f"Med {i:02d}") for i in range(15)))

    first = await _list(session_factory, "medicines", page=0, size=10, sort_by="name")
    second = await _list(session_factory, "medicines", page=1, size=10, sort_by="name")

    assert first.total_elements == second.total_elements == 15
    assert [m.name for m in first.items] == [f"Med {i:02d}" for i in range(10)]
    assert [m.name for m in second.items] == [f"Med {i:02d}" for i in range(10, 15)]
    assert first.total_pages == 2


@pytest.mark.asyncio
async def test_page_beyond_end_is_empty(session_factory, seed):
    await seed(*(medicine(f"Med {i:02d}") for i in range(15)))

    page = await _list(session_factory, "medicines", page=2, size=10)

    assert page.items == ()
    assert page.total_elements == 15
    assert page.page_index == 2


@pytest.mark.asyncio
async def test_total_counts_filtered_rows_not_all_rows(session_factory, seed):
    await seed(*(user(f"Dentist {i}", role="dentist", email=f"d{i}@clinic.test") for i in range(4)))
    await seed(*(user(f"Nurse {i}", role="nurse", email=f"n{i}@clinic.test") for i in range(3)))

    page = await _list(session_factory, "users", search="nurse", size=2)

    assert page.total_elements == 3
    assert len(page.items) == 2


@pytest.mark.asyncio
async def test_no_match_is_an_empty_page(session_factory, seed):
    await seed(patient("John", "Smith"))

    page = await _list(session_factory, "patients", search="nobody")

    assert page.items == ()
    assert page.total_elements == 0


# ---------------------------------------------------------------------------
# Typeahead search and lookups
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_search_only_is_unpaginated(session_factory, seed):
    await seed(*(patient(f"Smith{i}", "Family", email=None, phone=None) for i in range(30)))

    async with session_factory() as session:
        rows = await EntityListQuery(session).search_only("patients", "smith")

    assert len(rows) == 30


@pytest.mark.asyncio
async def test_search_only_respects_cap(session_factory, seed):
    await seed(*(medicine(f"Generic {i}") for i in range(8)))

    async with session_factory() as session:
        rows = await EntityListQuery(session, search_limit=5).search_only("medicines", "generic")

    assert [m.name for m in rows] == [f"Generic {i}" for i in range(5)]


@pytest.mark.asyncio
async def test_get_returns_row(session_factory, seed):
    (m,) = await seed(medicine("Chlorhexidine"))

    async with session_factory() as session:
        row = await EntityListQuery(session).get("medicines", m.id)

    assert row.name == "Chlorhexidine"


@pytest.mark.asyncio
async def test_get_missing_raises_not_found(session_factory):
    async with session_factory() as session:
        with pytest.raises(NotFoundError) as exc_info:
            await EntityListQuery(session).get("patients", 999)

    assert exc_info.value.entity_id == 999
    assert "not found" in str(exc_info.value)


def test_phone_match_is_case_sensitive_on_postgres():
    sql = str(
        build_search_predicate(ENTITY_SPECS["patients"], "Ab").compile(dialect=postgresql.dialect())
    )

    assert "patients.phone LIKE" in sql
    assert "patients.phone ILIKE" not in sql
    assert "lower(patients.phone)" not in sql


def test_user_predicate_has_no_identifier_field():
    sql = str(build_search_predicate(ENTITY_SPECS["users"], "2").compile(dialect=postgresql.dialect()))
    assert "users.id" not in sql


@pytest.mark.asyncio
async def test_users_are_not_matched_by_id(session_factory, seed):
    await seed(user("Alice Admin"), user("Bob Dentist", role="dentist"), user("Carol Nurse", role="nurse"))

    page = await _list(session_factory, "users", search="2")

    assert page.total_elements == 0


# ---------------------------------------------------------------------------
# Calendar, per-patient and role lookups
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_appointments_on_a_day_in_schedule_order(session_factory, seed):
    day = dt.date(2024, 6, 10)
    await seed(
        appointment(day, start="14:00", patient_name="late"),
        appointment(day - dt.timedelta(days=1), start="08:00", patient_name="yesterday"),
        appointment(day, start="08:30", patient_name="early"),
    )

    async with session_factory() as session:
        rows = await EntityListQuery(session).appointments_on(day)

    assert [a.patient_name for a in rows] == ["early", "late"]


@pytest.mark.asyncio
async def test_appointments_between_is_inclusive(session_factory, seed):
    await seed(*(appointment(dt.date(2024, 6, d), patient_name=f"d{d}") for d in (1, 5, 10, 11)))

    async with session_factory() as session:
        rows = await EntityListQuery(session).appointments_between(dt.date(2024, 6, 5), dt.date(2024, 6, 10))

    assert [a.patient_name for a in rows] == ["d5", "d10"]


@pytest.mark.asyncio
async def test_appointments_between_reversed_range_is_empty(session_factory, seed):
    await seed(appointment(dt.date(2024, 6, 5)))

    async with session_factory() as session:
        rows = await EntityListQuery(session).appointments_between(dt.date(2024, 6, 10), dt.date(2024, 6, 1))

    assert rows == []


@pytest.mark.asyncio
async def test_appointments_for_patient(session_factory, seed):
    await seed(
        appointment(dt.date(2024, 6, 12), patient_id=7, patient_name="seven-b"),
        appointment(dt.date(2024, 6, 11), patient_id=8, patient_name="eight"),
        appointment(dt.date(2024, 6, 3), patient_id=7, patient_name="seven-a"),
    )

    async with session_factory() as session:
        rows = await EntityListQuery(session).appointments_for_patient(7)

    assert [a.patient_name for a in rows] == ["seven-a", "seven-b"]


@pytest.mark.asyncio
async def test_users_with_roles(session_factory, seed):
    await seed(
        user("Zoe Dentist", role="dentist"),
        user("Alice Admin", role="admin"),
        user("Bob Dentist", role="dentist"),
        user("Nina Nurse", role="nurse"),
    )

    async with session_factory() as session:
        query = EntityListQuery(session)
        dentists = await query.users_with_roles(["dentist"])
        staff = await query.users_with_roles(["nurse", "dentist"])
        nobody = await query.users_with_roles([])

    assert [u.name for u in dentists] == ["Bob Dentist", "Zoe Dentist"]
    assert [u.name for u in staff] == ["Bob Dentist", "Nina Nurse", "Zoe Dentist"]
    assert nobody == []


@pytest.mark.parametrize(
    "year, month, expected",
    [
        (2024, 2, (dt.date(2024, 2, 1), dt.date(2024, 2, 29))),
        (2023, 2, (dt.date(2023, 2, 1), dt.date(2023, 2, 28))),
        (2024, 12, (dt.date(2024, 12, 1), dt.date(2024, 12, 31))),
    ],
)
def test_month_bounds(year, month, expected):
    assert month_bounds(year, month) == expected


def test_week_bounds_are_monday_to_sunday():
    # 2024-06-12 is a Wednesday
    assert week_bounds(dt.date(2024, 6, 12)) == (dt.date(2024, 6, 10), dt.date(2024, 6, 16))
    assert week_bounds(dt.date(2024, 6, 10)) == (dt.date(2024, 6, 10), dt.date(2024, 6, 16))
    assert week_bounds(dt.date(2024, 6, 16)) == (dt.date(2024, 6, 10), dt.date(2024, 6, 16))
