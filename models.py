"""
models.py
Domain dataclasses for the subscription billing app and the clinic app.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class InvalidArgument(ValueError):
    """Raised for any rejected operator input or disallowed state transition."""


# ---------- Subscription billing ----------

class PlanKind(Enum):
    MONTHLY = "Monthly"
    ANNUAL = "Annual"


class SubscriberStatus(Enum):
    ACTIVE = "Active"
    CANCELLED = "Cancelled"


class SubscriptionInvoiceState(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"


@dataclass(frozen=True)
class Plan:
    plan_id: int
    name: str
    monthly_price: float
    kind: PlanKind
    features: tuple[str, ...] = ()
    trial_days: int = 0
    annual_discount: float = 0.10

    def compute_amount(self) -> float:
        """Charge for one billing cycle."""
        if self.kind is PlanKind.MONTHLY:
            return self.monthly_price
        if self.kind is PlanKind.ANNUAL:
            return self.monthly_price * 12 * (1 - self.annual_discount)
        raise InvalidArgument(f"Unsupported plan kind: {self.kind}")

    def label(self) -> str:
        return f"{self.plan_id}. {self.name} ({self.monthly_price:.2f}/month, {self.kind.value})"


@dataclass
class Subscriber:
    id: int
    name: str
    email: str
    plan: Plan
    status: SubscriberStatus = SubscriberStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is SubscriberStatus.ACTIVE


@dataclass
class SubscriptionInvoice:
    number: int
    subscriber_id: int
    amount: float
    issued_on: date
    due_date: date
    state: SubscriptionInvoiceState = SubscriptionInvoiceState.PENDING
    paid_on: date | None = None

    def mark_paid(self, on: date) -> None:
        self.state = SubscriptionInvoiceState.PAID
        self.paid_on = on

    def mark_overdue(self) -> None:
        # Paid is terminal
        if self.state is SubscriptionInvoiceState.PENDING:
            self.state = SubscriptionInvoiceState.OVERDUE

    def __str__(self) -> str:
        return (
            f"Invoice#{self.number} | Subscriber: {self.subscriber_id} | "
            f"Amount: {self.amount:.2f} | Due: {self.due_date.isoformat()} | State: {self.state.value}"
        )


# ---------- Clinic ----------

@dataclass(frozen=True)
class Patient:
    id: int
    name: str
    contact: str


@dataclass(frozen=True)
class Doctor:
    id: int
    name: str
    specialty: str
    contact: str = ""


class AppointmentStatus(Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass
class Appointment:
    id: int
    patient_id: int
    doctor_id: int
    slot: datetime
    status: AppointmentStatus = AppointmentStatus.SCHEDULED


@dataclass(frozen=True)
class PrescriptionItem:
    name: str
    quantity: int
    unit_price: float

    def total(self) -> float:
        return self.quantity * self.unit_price

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity} @ {self.unit_price:.2f} => {self.total():.2f}"


@dataclass
class Prescription:
    items: list[PrescriptionItem] = field(default_factory=list)

    def add_item(self, item: PrescriptionItem) -> None:
        self.items.append(item)

    def items_total(self) -> float:
        return sum(it.total() for it in self.items)


@dataclass
class Consultation:
    id: int
    appointment_id: int
    patient_id: int
    doctor_id: int
    notes: str
    fee: float
    prescription: Prescription = field(default_factory=Prescription)
    invoice_id: int | None = None


class InvoiceStatus(Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


@dataclass
class ClinicInvoice:
    id: int
    consultation_id: int
    patient_id: int
    consultation_fee: float
    items: tuple[PrescriptionItem, ...]
    tax_rate: float = 0.12
    status: InvoiceStatus = InvoiceStatus.OPEN

    def items_total(self) -> float:
        return sum(it.total() for it in self.items)

    def subtotal(self) -> float:
        return self.consultation_fee + self.items_total()

    def tax(self) -> float:
        return self.subtotal() * self.tax_rate

    def total(self) -> float:
        return self.subtotal() + self.tax()

    def close(self) -> None:
        self.status = InvoiceStatus.CLOSED


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    SETTLED = "SETTLED"


@dataclass
class Payment:
    method: PaymentMethod
    amount: float
    card_holder: str | None = None  # card payments only
    paid_at: datetime = field(default_factory=datetime.now)
    status: PaymentStatus = PaymentStatus.PENDING
    invoice_id: int | None = None

    @classmethod
    def cash(cls, amount: float) -> Payment:
        return cls(method=PaymentMethod.CASH, amount=amount)

    @classmethod
    def card(cls, amount: float, card_holder: str) -> Payment:
        if not card_holder.strip():
            raise InvalidArgument("Card holder name is required for card payments.")
        return cls(method=PaymentMethod.CARD, amount=amount, card_holder=card_holder.strip())

    def settle(self, invoice_id: int) -> None:
        self.invoice_id = invoice_id
        self.status = PaymentStatus.SETTLED
