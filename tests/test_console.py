from __future__ import annotations

from datetime import datetime

import billing_app
import clinic_app
from billing import BillingService
from clinic import Clinic
from models import InvoiceStatus, SubscriberStatus


def scripted(*lines: str):
    it = iter(lines)

    def read(prompt: str = "") -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    return read


def test_billing_menu_flow(capsys):
    billing = billing_app.run(
        BillingService(),
        scripted(
            "1", "7", "Asha", "asha@example.com", "2",
            "4", "7",
            "5", "1000",
            "5", "1000",
            "5", "4242",
            "3", "7",
            "7",
            "0",
        ),
    )
    out = capsys.readouterr().out

    assert billing.total_revenue == 4860.0
    assert billing.get_subscriber(7).status is SubscriberStatus.CANCELLED
    assert "Generated Invoice#1000" in out
    assert "Invoice not found!" in out
    assert "Total Revenue: 4860.00" in out


def test_billing_menu_rejects_invalid_plan_code(capsys):
    billing = billing_app.run(
        BillingService(),
        scripted("1", "7", "Asha", "asha@example.com", "5", "9", "0"),
    )
    out = capsys.readouterr().out

    assert billing.subscribers() == []
    assert "Unknown plan code 5" in out
    assert "Invalid choice!" in out


def test_billing_menu_reports_bad_numbers_and_continues(capsys):
    billing_app.run(BillingService(), scripted("4", "abc", "6", "0"))
    out = capsys.readouterr().out
    assert "Subscriber ID must be a whole number." in out
    assert "No invoices yet." in out
    assert "Exiting..." in out


def test_billing_menu_exits_on_end_of_input(capsys):
    def read(prompt: str = "") -> str:
        raise EOFError

    billing_app.run(BillingService(), read)
    assert "Exiting..." in capsys.readouterr().out


def test_clinic_menu_full_workflow(capsys):
    clinic = Clinic()
    clinic.add_patient("Ramesh", "9876543210")
    clinic.add_doctor("Dr. Anand", "General")
    ap = clinic.schedule_appointment(1, 1, datetime(2024, 5, 9, 10, 0))
    clinic.complete_appointment(ap.id)

    clinic_app.run(
        clinic,
        scripted(
            "4", "1", "Fever", "500", "y", "Paracetamol", "2", "50", "",
            "5", "1",
            "6", "1", "cash", "600",
            "8",
            "6", "1", "card", "Ramesh K", "672",
            "8",
            "9",
        ),
    )
    out = capsys.readouterr().out

    assert "TOTAL: 672.00" in out
    assert "partial payments unsupported" in out
    assert "Receipt - Card" in out
    assert "Total outstanding: 672.00" in out
    assert "No outstanding dues." in out
    assert clinic.find_invoice(1).status is InvoiceStatus.CLOSED


def test_clinic_menu_scheduling_and_listing(capsys):
    clinic = Clinic()
    clinic.add_patient("Ramesh", "1")
    clinic.add_patient("Sita", "2")
    clinic.add_doctor("Dr. Anand", "General")
    clinic.add_doctor("Dr. Kavya", "ENT")

    clinic_app.run(
        clinic,
        scripted(
            "3", "1", "1", "2024-05-10 11:00",
            "3", "2", "1", "2024-05-10 11:00",
            "3", "2", "2", "2024-05-10 09:00",
            "3", "2", "2", "tomorrow",
            "4", "1",
            "7", "",
            "7", "2",
            "9",
        ),
    )
    out = capsys.readouterr().out

    assert "Error: Doctor already has an appointment at that slot." in out
    assert "Error: Bad date format" in out
    assert "Consultation can only be recorded for completed appointments. Current status: SCHEDULED" in out
    assert [a.id for a in clinic.list_appointments()] == [2, 1]
    assert [a.id for a in clinic.list_appointments(2)] == [2]


def test_clinic_run_seeds_sample_data(capsys):
    clinic = clinic_app.run(read=scripted("7", "", "9"))
    out = capsys.readouterr().out

    assert len(clinic.list_appointments()) == 1
    assert "Dr. Anand" in out
    assert "COMPLETED" in out


def test_clinic_menu_exits_when_input_ends_mid_action(capsys):
    clinic = clinic_app.run(Clinic(), scripted("1", "Ramesh"))
    out = capsys.readouterr().out

    assert "Input ended." in out
    assert "Exiting..." in out
    assert clinic.add_patient("Sita", "2").id == 1


def test_billing_menu_exits_when_input_ends_mid_action(capsys):
    billing = billing_app.run(BillingService(), scripted("1", "7", "Asha"))
    out = capsys.readouterr().out

    assert "Exiting..." in out
    assert billing.subscribers() == []
