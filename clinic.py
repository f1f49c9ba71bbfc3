"""
clinic.py
Clinic registry: patients, doctors, appointments, consultations, invoices and payments.

Entities reference each other by id; the Clinic owns every collection and
enforces the workflow Appointment -> Consultation -> Invoice -> Payment.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime

from config import Settings, get_settings
from models import (
    Appointment,
    AppointmentStatus,
    ClinicInvoice,
    Consultation,
    Doctor,
    InvalidArgument,
    InvoiceStatus,
    Patient,
    Payment,
    PaymentMethod,
    PrescriptionItem,
)

logger = logging.getLogger(__name__)


class Clinic:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._patients: dict[int, Patient] = {}
        self._doctors: dict[int, Doctor] = {}
        self._appointments: dict[int, Appointment] = {}
        self._consultations: dict[int, Consultation] = {}
        self._invoices: dict[int, ClinicInvoice] = {}
        self._payments: list[Payment] = []

        self._patient_seq = 1
        self._doctor_seq = 1
        self._appointment_seq = 1
        self._consultation_seq = 1
        self._invoice_seq = 1

    # ---------- People ----------

    def add_patient(self, name: str, contact: str) -> Patient:
        if not name.strip():
            raise InvalidArgument("Patient name is required.")
        p = Patient(self._patient_seq, name.strip(), contact.strip())
        self._patient_seq += 1
        self._patients[p.id] = p
        logger.info("Added patient %s", p.id)
        return p

    def add_doctor(self, name: str, specialty: str, contact: str = "") -> Doctor:
        if not name.strip():
            raise InvalidArgument("Doctor name is required.")
        d = Doctor(self._doctor_seq, name.strip(), specialty.strip(), contact.strip())
        self._doctor_seq += 1
        self._doctors[d.id] = d
        logger.info("Added doctor %s", d.id)
        return d

    def patient(self, patient_id: int) -> Patient:
        p = self._patients.get(patient_id)
        if p is None:
            raise InvalidArgument(f"Patient {patient_id} not found.")
        return p

    def doctor(self, doctor_id: int) -> Doctor:
        d = self._doctors.get(doctor_id)
        if d is None:
            raise InvalidArgument(f"Doctor {doctor_id} not found.")
        return d

    # ---------- Appointments ----------

    def schedule_appointment(self, patient_id: int, doctor_id: int, slot: datetime) -> Appointment:
        self.patient(patient_id)
        self.doctor(doctor_id)

        # Exact slot match only; overlapping slots at other timestamps are allowed
        for a in self._appointments.values():
            if a.doctor_id == doctor_id and a.slot == slot and a.status is AppointmentStatus.SCHEDULED:
                raise InvalidArgument("Doctor already has an appointment at that slot.")

        ap = Appointment(self._appointment_seq, patient_id, doctor_id, slot)
        self._appointment_seq += 1
        self._appointments[ap.id] = ap
        logger.info("Scheduled appointment %s for doctor %s at %s", ap.id, doctor_id, slot)
        return ap

    def find_appointment(self, appointment_id: int) -> Appointment | None:
        return self._appointments.get(appointment_id)

    def _scheduled_appointment(self, appointment_id: int) -> Appointment:
        ap = self.find_appointment(appointment_id)
        if ap is None:
            raise InvalidArgument(f"Appointment {appointment_id} not found.")
        if ap.status is not AppointmentStatus.SCHEDULED:
            raise InvalidArgument(f"Appointment {appointment_id} is {ap.status.value}, not SCHEDULED.")
        return ap

    def complete_appointment(self, appointment_id: int) -> Appointment:
        ap = self._scheduled_appointment(appointment_id)
        ap.status = AppointmentStatus.COMPLETED
        logger.info("Appointment %s completed", appointment_id)
        return ap

    def cancel_appointment(self, appointment_id: int) -> Appointment:
        ap = self._scheduled_appointment(appointment_id)
        ap.status = AppointmentStatus.CANCELLED
        logger.info("Appointment %s cancelled", appointment_id)
        return ap

    def list_appointments(self, doctor_id: int | None = None) -> list[Appointment]:
        rows = [a for a in self._appointments.values() if doctor_id is None or a.doctor_id == doctor_id]
        # sorted() is stable: equal slots keep insertion order
        return sorted(rows, key=lambda a: a.slot)

    # ---------- Consultations ----------

    def record_consultation(self, appointment_id: int, notes: str, fee: float) -> Consultation:
        ap = self.find_appointment(appointment_id)
        if ap is None:
            raise InvalidArgument(f"Appointment {appointment_id} not found.")
        if ap.status is not AppointmentStatus.COMPLETED:
            raise InvalidArgument(
                f"Appointment not completed (current status: {ap.status.value}); "
                "consultations can only be recorded for completed appointments."
            )
        if any(c.appointment_id == appointment_id for c in self._consultations.values()):
            raise InvalidArgument(f"Consultation already recorded for appointment {appointment_id}.")
        if not (math.isfinite(fee) and fee >= 0):
            raise InvalidArgument("Consultation fee must be a finite, non-negative amount.")

        c = Consultation(self._consultation_seq, ap.id, ap.patient_id, ap.doctor_id, notes.strip(), fee)
        self._consultation_seq += 1
        self._consultations[c.id] = c
        logger.info("Recorded consultation %s for appointment %s", c.id, ap.id)
        return c

    def find_consultation(self, consultation_id: int) -> Consultation | None:
        return self._consultations.get(consultation_id)

    def add_prescription_item(
        self, consultation_id: int, name: str, quantity: int, unit_price: float
    ) -> PrescriptionItem:
        c = self.find_consultation(consultation_id)
        if c is None:
            raise InvalidArgument(f"Consultation {consultation_id} not found.")
        if not name.strip():
            raise InvalidArgument("Item name is required.")
        if not (isinstance(quantity, int) and quantity > 0):
            raise InvalidArgument("Quantity must be a whole number > 0.")
        if not (math.isfinite(unit_price) and unit_price >= 0):
            raise InvalidArgument("Unit price must be a finite, non-negative amount.")

        item = PrescriptionItem(name.strip(), quantity, unit_price)
        c.prescription.add_item(item)
        return item

    # ---------- Invoices & payments ----------

    def generate_invoice(self, consultation_id: int) -> ClinicInvoice:
        c = self.find_consultation(consultation_id)
        if c is None:
            raise InvalidArgument(f"Consultation {consultation_id} not found.")
        if c.invoice_id is not None:
            raise InvalidArgument(f"Invoice already exists for consultation {consultation_id}.")

        inv = ClinicInvoice(
            id=self._invoice_seq,
            consultation_id=c.id,
            patient_id=c.patient_id,
            consultation_fee=c.fee,
            items=tuple(c.prescription.items),
            tax_rate=self.settings.tax_rate,
        )
        self._invoice_seq += 1
        self._invoices[inv.id] = inv
        c.invoice_id = inv.id
        logger.info("Generated invoice %s for consultation %s (total %.2f)", inv.id, c.id, inv.total())
        return inv

    def find_invoice(self, invoice_id: int) -> ClinicInvoice | None:
        return self._invoices.get(invoice_id)

    def record_payment(self, invoice_id: int, payment: Payment) -> ClinicInvoice:
        inv = self.find_invoice(invoice_id)
        if inv is None:
            raise InvalidArgument(f"Invoice {invoice_id} not found.")
        if inv.status is InvoiceStatus.CLOSED:
            raise InvalidArgument(f"Invoice {invoice_id} is already closed.")
        due = inv.total()
        if not (math.isfinite(payment.amount) and payment.amount >= due - self.settings.payment_epsilon):
            raise InvalidArgument(
                f"Insufficient amount {payment.amount:.2f} (due {due:.2f}); partial payments unsupported."
            )

        payment.settle(inv.id)
        self._payments.append(payment)
        inv.close()
        logger.info("Invoice %s closed by %s payment of %.2f", inv.id, payment.method.value, payment.amount)
        return inv

    def payments_for(self, invoice_id: int) -> list[Payment]:
        return [p for p in self._payments if p.invoice_id == invoice_id]

    def invoices(self) -> list[ClinicInvoice]:
        return list(self._invoices.values())

    def report_outstanding(self) -> list[ClinicInvoice]:
        return [inv for inv in self._invoices.values() if inv.status is InvoiceStatus.OPEN]


def receipt_text(payment: Payment, invoice: ClinicInvoice, patient: Patient) -> str:
    lines = [f"Receipt - {payment.method.value.capitalize()}", f"Invoice: {invoice.id}", f"Patient: {patient.name}"]
    if payment.method is PaymentMethod.CARD:
        lines.append(f"Card Holder: {payment.card_holder}")
    elif payment.method is not PaymentMethod.CASH:
        raise InvalidArgument(f"Unsupported payment method: {payment.method}")
    lines.append(f"Amount: {payment.amount:.2f}")
    lines.append(f"Date: {payment.paid_at.isoformat(sep=' ', timespec='minutes')}")
    return "\n".join(lines)


def invoice_text(invoice: ClinicInvoice, patient: Patient) -> str:
    lines = [
        f"Invoice[id={invoice.id}, patient={patient.name}, status={invoice.status.value}]",
        f"Consultation fee: {invoice.consultation_fee:.2f}",
        "Items:",
    ]
    if invoice.items:
        lines.extend(f"  {it}" for it in invoice.items)
    else:
        lines.append("  (none)")
    lines.append(f"Subtotal: {invoice.subtotal():.2f}")
    lines.append(f"Tax({invoice.tax_rate * 100:.0f}%): {invoice.tax():.2f}")
    lines.append(f"TOTAL: {invoice.total():.2f}")
    return "\n".join(lines)
