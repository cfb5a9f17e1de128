# src/dentalcare/api/schemas.py
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from dentalcare import models
from dentalcare.dashboard import DashboardSnapshot, RecentPatient, StatisticItem, UpcomingAppointment
from dentalcare.listing import Page

T = TypeVar("T")

# money renders as a JSON number, not a string
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------
# Patients
# -----------------------------
class PatientIn(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=320)
    phone: Optional[str] = Field(None, max_length=40)
    date_of_birth: Optional[dt.date] = None
    address: Optional[str] = Field(None, max_length=500)
    medical_notes: Optional[str] = None
    last_visit: Optional[dt.date] = None


class PatientOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    date_of_birth: Optional[dt.date]
    address: Optional[str]
    medical_notes: Optional[str]
    last_visit: Optional[dt.date]
    created_at: dt.datetime


def patient_out(p: models.Patient) -> PatientOut:
    return PatientOut(
        id=p.id,
        first_name=p.first_name,
        last_name=p.last_name,
        email=p.email,
        phone=p.phone,
        date_of_birth=p.date_of_birth,
        address=p.address,
        medical_notes=p.medical_notes,
        last_visit=p.last_visit,
        created_at=p.created_at,
    )


# -----------------------------
# Appointments
# -----------------------------
class AppointmentIn(CamelModel):
    patient_id: int
    patient_name: str = Field(..., min_length=1, max_length=200)
    dentist_name: str = Field(..., min_length=1, max_length=200)
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    type: str = Field(..., min_length=1, max_length=80)
    status: str = Field("scheduled", min_length=1, max_length=40)
    treatment_type: Optional[str] = Field(None, max_length=120)
    notes: Optional[str] = None


class AppointmentOut(CamelModel):
    id: int
    patient_id: int
    patient_name: str
    dentist_name: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    type: str
    status: str
    treatment_type: Optional[str]
    notes: Optional[str]
    created_at: dt.datetime


def appointment_out(a: models.Appointment) -> AppointmentOut:
    return AppointmentOut(
        id=a.id,
        patient_id=a.patient_id,
        patient_name=a.patient_name,
        dentist_name=a.dentist_name,
        date=a.date,
        start_time=a.start_time,
        end_time=a.end_time,
        type=a.type,
        status=a.status,
        treatment_type=a.treatment_type,
        notes=a.notes,
        created_at=a.created_at,
    )


# -----------------------------
# Medicines
# -----------------------------
class MedicineIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = Field(None, max_length=120)
    manufacturer: Optional[str] = Field(None, max_length=200)
    dosage: Optional[str] = Field(None, max_length=120)
    stock_quantity: int = Field(0, ge=0)
    unit_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    expiry_date: Optional[dt.date] = None


class MedicineOut(CamelModel):
    id: int
    name: str
    category: Optional[str]
    manufacturer: Optional[str]
    dosage: Optional[str]
    stock_quantity: int
    unit_price: Optional[Money]
    expiry_date: Optional[dt.date]
    created_at: dt.datetime


def medicine_out(m: models.Medicine) -> MedicineOut:
    return MedicineOut(
        id=m.id,
        name=m.name,
        category=m.category,
        manufacturer=m.manufacturer,
        dosage=m.dosage,
        stock_quantity=m.stock_quantity,
        unit_price=m.unit_price,
        expiry_date=m.expiry_date,
        created_at=m.created_at,
    )


# -----------------------------
# Users
# -----------------------------
class UserIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    role: str = Field(..., min_length=1, max_length=40)


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    role: str
    created_at: dt.datetime


def user_out(u: models.User) -> UserOut:
    return UserOut(id=u.id, name=u.name, email=u.email, role=u.role, created_at=u.created_at)


# -----------------------------
# Paging envelope
# -----------------------------
class PageOut(CamelModel, Generic[T]):
    items: List[T]
    total_elements: int
    page_index: int
    page_size: int
    total_pages: int


def page_out(page: Page, mapper) -> dict:
    return {
        "items": [mapper(item) for item in page.items],
        "total_elements": page.total_elements,
        "page_index": page.page_index,
        "page_size": page.page_size,
        "total_pages": page.total_pages,
    }


# -----------------------------
# Dashboard
# -----------------------------
class StatisticOut(CamelModel):
    name: str
    value: int


class UpcomingAppointmentOut(CamelModel):
    id: int
    patient_id: int
    patient_name: str
    dentist_name: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    status: str
    type: str
    treatment_type: Optional[str]


class RecentPatientOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    phone: Optional[str]
    last_visit: Optional[dt.date]


class DashboardStatsOut(CamelModel):
    today_appointments: int
    total_appointments: int
    total_patients: int
    total_users: int
    upcoming_appointments: List[UpcomingAppointmentOut]
    recent_patients: List[RecentPatientOut]
    appointments_by_type: List[StatisticOut]
    appointments_by_status: List[StatisticOut]
    treatments_by_type: List[StatisticOut]


def _statistic_out(s: StatisticItem) -> StatisticOut:
    return StatisticOut(name=s.name, value=s.value)


def _upcoming_out(a: UpcomingAppointment) -> UpcomingAppointmentOut:
    return UpcomingAppointmentOut(
        id=a.id,
        patient_id=a.patient_id,
        patient_name=a.patient_name,
        dentist_name=a.dentist_name,
        date=a.date,
        start_time=a.start_time,
        end_time=a.end_time,
        status=a.status,
        type=a.type,
        treatment_type=a.treatment_type,
    )


def _recent_out(p: RecentPatient) -> RecentPatientOut:
    return RecentPatientOut(
        id=p.id,
        first_name=p.first_name,
        last_name=p.last_name,
        phone=p.phone,
        last_visit=p.last_visit,
    )


def dashboard_stats_out(snapshot: DashboardSnapshot) -> DashboardStatsOut:
    return DashboardStatsOut(
        today_appointments=snapshot.today_appointments,
        total_appointments=snapshot.total_appointments,
        total_patients=snapshot.total_patients,
        total_users=snapshot.total_users,
        upcoming_appointments=[_upcoming_out(a) for a in snapshot.upcoming_appointments],
        recent_patients=[_recent_out(p) for p in snapshot.recent_patients],
        appointments_by_type=[_statistic_out(s) for s in snapshot.appointments_by_type],
        appointments_by_status=[_statistic_out(s) for s in snapshot.appointments_by_status],
        treatments_by_type=[_statistic_out(s) for s in snapshot.treatments_by_type],
    )
