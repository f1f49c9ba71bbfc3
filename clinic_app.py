"""
clinic_app.py
Console Patient Appointment & Billing manager.
Run: python clinic_app.py
"""

from __future__ import annotations

import logging
from typing import Callable

import config
import utils
from clinic import Clinic, invoice_text, receipt_text
from models import AppointmentStatus, InvalidArgument, InvoiceStatus, Payment

logger = logging.getLogger(__name__)

Reader = Callable[[str], str]

MENU = """
--- Patient Appointment & Billing ---
1. Add Patient
2. Add Doctor
3. Schedule Appointment
4. Record Consultation
5. Generate Invoice
6. Record Payment
7. List Appointments
8. Outstanding Dues Report
9. Exit"""


def add_patient(clinic: Clinic, read: Reader) -> None:
    name = read("Patient name: ")
    contact = read("Contact number: ")
    p = clinic.add_patient(name, contact)
    print(f"Added Patient: Patient[id={p.id}, name={p.name}, contact={p.contact}]")


def add_doctor(clinic: Clinic, read: Reader) -> None:
    name = read("Doctor name: ")
    specialty = read("Specialty: ")
    d = clinic.add_doctor(name, specialty)
    print(f"Added Doctor: Doctor[id={d.id}, name={d.name}, specialty={d.specialty}]")


def schedule_appointment(clinic: Clinic, read: Reader) -> None:
    fmt = clinic.settings.datetime_format
    pid = utils.parse_int(read("Patient ID: "), "Patient ID")
    did = utils.parse_int(read("Doctor ID: "), "Doctor ID")
    slot = utils.parse_slot(read("Appointment date/time (yyyy-MM-dd HH:mm): "), fmt)
    a = clinic.schedule_appointment(pid, did, slot)
    print(
        f"Appointment scheduled: Appointment[id={a.id}, patient={clinic.patient(pid).name}, "
        f"doctor={clinic.doctor(did).name}, at={utils.format_slot(a.slot, fmt)}, status={a.status.value}]"
    )


def record_consultation(clinic: Clinic, read: Reader) -> None:
    aid = utils.parse_int(read("Appointment ID: "), "Appointment ID")
    ap = clinic.find_appointment(aid)
    if ap is None:
        print("Appointment not found")
        return
    if ap.status is not AppointmentStatus.COMPLETED:
        print(
            "Consultation can only be recorded for completed appointments. "
            f"Current status: {ap.status.value}"
        )
        return

    notes = read("Consultation notes: ")
    fee = utils.parse_amount(read("Consultation fee: "), "Consultation fee")
    c = clinic.record_consultation(aid, notes, fee)
    print(
        f"Recorded consultation: Consultation[id={c.id}, appointment={c.appointment_id}, "
        f"patient={clinic.patient(c.patient_id).name}, doctor={clinic.doctor(c.doctor_id).name}, "
        f"fee={c.fee:.2f}, notes={c.notes}]"
    )

    if read("Add prescriptions now? (y/n) ").strip().lower() != "y":
        return
    while True:
        item = read("Item name (or blank to finish): ")
        if not item.strip():
            break
        try:
            qty = utils.parse_int(read("Quantity: "), "Quantity")
            price = utils.parse_amount(read("Unit price: "), "Unit price")
            clinic.add_prescription_item(c.id, item, qty, price)
        except InvalidArgument as e:
            # Keep the consultation; only this line item is skipped
            print(f"Item skipped: {e}")
    print("Prescription recorded.")
    for it in c.prescription.items:
        print(f"  {it}")


def generate_invoice(clinic: Clinic, read: Reader) -> None:
    cid = utils.parse_int(read("Consultation ID: "), "Consultation ID")
    inv = clinic.generate_invoice(cid)
    print(invoice_text(inv, clinic.patient(inv.patient_id)))


def record_payment(clinic: Clinic, read: Reader) -> None:
    iid = utils.parse_int(read("Invoice ID: "), "Invoice ID")
    inv = clinic.find_invoice(iid)
    if inv is None:
        print("Invoice not found")
        return
    if inv.status is InvoiceStatus.CLOSED:
        print("Invoice already closed")
        return

    print(f"Amount due: {inv.total():.2f}")
    kind = read("Payment type (cash/card): ").strip().lower()
    if kind == "cash":
        payment = Payment.cash(utils.parse_amount(read("Amount: ")))
    elif kind == "card":
        holder = read("Card holder name: ")
        payment = Payment.card(utils.parse_amount(read("Amount: ")), holder)
    else:
        raise InvalidArgument(f"Unknown payment type {kind!r}; use cash or card.")

    clinic.record_payment(iid, payment)
    print("Payment recorded. Receipt:")
    print(receipt_text(payment, inv, clinic.patient(inv.patient_id)))


def list_appointments(clinic: Clinic, read: Reader) -> None:
    did = utils.parse_optional_int(read("Filter by doctor id (blank for all): "), "Doctor ID")
    df = utils.appointments_frame(clinic, clinic.list_appointments(did))
    if df.empty:
        print("No appointments.")
    else:
        print(df.to_string(index=False))


def report_outstanding(clinic: Clinic, read: Reader) -> None:
    print("\n--- Outstanding Invoices ---")
    df = utils.outstanding_frame(clinic, clinic.report_outstanding())
    if df.empty:
        print("No outstanding dues.")
        return
    print(df.to_string(index=False))
    print(f"Total outstanding: {df['total'].sum():.2f}")


ACTIONS: dict[str, Callable[[Clinic, Reader], None]] = {
    "1": add_patient,
    "2": add_doctor,
    "3": schedule_appointment,
    "4": record_consultation,
    "5": generate_invoice,
    "6": record_payment,
    "7": list_appointments,
    "8": report_outstanding,
}


def run(clinic: Clinic | None = None, read: Reader = input, seed: bool = True) -> Clinic:
    if clinic is None:
        clinic = Clinic()
        if seed:
            utils.insert_clinic_sample_data(clinic)

    while True:
        print(MENU)
        try:
            choice = read("Choice: ").strip()
        except EOFError:
            choice = "9"

        if choice == "9":
            print("Exiting...")
            return clinic

        action = ACTIONS.get(choice)
        if action is None:
            print("Invalid choice")
            continue
        try:
            action(clinic, read)
        except EOFError:
            print("\nInput ended.")
            print("Exiting...")
            return clinic
        except InvalidArgument as e:
            logger.debug("Rejected menu option %s: %s", choice, e)
            print(f"Error: {e}")


def main() -> None:
    config.configure_logging()
    run()


if __name__ == "__main__":
    main()
