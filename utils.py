"""
utils.py
Input parsing, report tables, sample data.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
import pandas as pd

from billing import BillingService
from clinic import Clinic
from models import Appointment, ClinicInvoice, InvalidArgument, SubscriptionInvoice, SubscriptionInvoiceState


# ---------- Parsing ----------

def parse_int(text: str, field: str = "Value") -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise InvalidArgument(f"{field} must be a whole number.") from None


def parse_optional_int(text: str, field: str = "Value") -> int | None:
    if not text.strip():
        return None
    return parse_int(text, field)


def parse_amount(text: str, field: str = "Amount") -> float:
    try:
        value = float(text.strip())
    except ValueError:
        raise InvalidArgument(f"{field} must be numeric.") from None
    if not math.isfinite(value):
        raise InvalidArgument(f"{field} must be a finite number.")
    return value


def parse_slot(text: str, fmt: str) -> datetime:
    try:
        return datetime.strptime(text.strip(), fmt)
    except ValueError:
        raise InvalidArgument(f"Bad date format, expected {fmt}.") from None


def format_slot(slot: datetime, fmt: str) -> str:
    return slot.strftime(fmt)


# ---------- Billing reports ----------

INVOICE_COLUMNS = ["number", "subscriber_id", "amount", "issued_on", "due_date", "state", "paid_on"]


def invoices_frame(invoices: list[SubscriptionInvoice]) -> pd.DataFrame:
    rows = [
        {
            "number": inv.number,
            "subscriber_id": inv.subscriber_id,
            "amount": round(inv.amount, 2),
            "issued_on": inv.issued_on.isoformat(),
            "due_date": inv.due_date.isoformat(),
            "state": inv.state.value,
            "paid_on": inv.paid_on.isoformat() if inv.paid_on else "",
        }
        for inv in invoices
    ]
    return pd.DataFrame(rows, columns=INVOICE_COLUMNS)


def revenue_summary_by_month(invoices: list[SubscriptionInvoice]) -> pd.DataFrame:
    paid = [inv for inv in invoices if inv.state is SubscriptionInvoiceState.PAID]
    if not paid:
        return pd.DataFrame(columns=["month", "revenue"])
    df = pd.DataFrame(
        {"month": [inv.paid_on.strftime("%Y-%m") for inv in paid], "revenue": [inv.amount for inv in paid]}
    )
    return df.groupby("month", as_index=False)["revenue"].sum().sort_values("month", ascending=False)


# ---------- Clinic reports ----------

APPOINTMENT_COLUMNS = ["id", "patient", "doctor", "slot", "status"]


def appointments_frame(clinic: Clinic, appointments: list[Appointment]) -> pd.DataFrame:
    fmt = clinic.settings.datetime_format
    rows = [
        {
            "id": a.id,
            "patient": clinic.patient(a.patient_id).name,
            "doctor": clinic.doctor(a.doctor_id).name,
            "slot": format_slot(a.slot, fmt),
            "status": a.status.value,
        }
        for a in appointments
    ]
    return pd.DataFrame(rows, columns=APPOINTMENT_COLUMNS)


def outstanding_frame(clinic: Clinic, invoices: list[ClinicInvoice]) -> pd.DataFrame:
    rows = [
        {
            "invoice_id": inv.id,
            "patient": clinic.patient(inv.patient_id).name,
            "subtotal": round(inv.subtotal(), 2),
            "tax": round(inv.tax(), 2),
            "total": round(inv.total(), 2),
        }
        for inv in invoices
    ]
    return pd.DataFrame(rows, columns=["invoice_id", "patient", "subtotal", "tax", "total"])


# ---------- Sample data ----------

def insert_clinic_sample_data(clinic: Clinic, now: datetime | None = None) -> None:
    """
    Two patients, two doctors and one completed appointment (yesterday 10:00),
    so a consultation can be recorded straight away.
    """
    now = now or datetime.now()
    p1 = clinic.add_patient("Ramesh", "9876543210")
    clinic.add_patient("Sita", "9123456780")
    d1 = clinic.add_doctor("Dr. Anand", "General")
    clinic.add_doctor("Dr. Kavya", "ENT")

    yesterday = (now - timedelta(days=1)).replace(hour=10, minute=0, second=0, microsecond=0)
    ap = clinic.schedule_appointment(p1.id, d1.id, yesterday)
    clinic.complete_appointment(ap.id)


def today_iso() -> str:
    return date.today().isoformat()


def billing_overview(billing: BillingService) -> str:
    active = sum(1 for s in billing.subscribers() if s.is_active)
    return f"Subscribers: {len(billing.subscribers())} ({active} active) | As of {today_iso()}"
