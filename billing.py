"""
billing.py
In-memory subscription billing: plan catalog, subscribers, invoices and revenue.
"""

from __future__ import annotations

import logging
import re
from datetime import date, timedelta

from config import Settings, get_settings
from models import (
    InvalidArgument,
    Plan,
    PlanKind,
    Subscriber,
    SubscriberStatus,
    SubscriptionInvoice,
    SubscriptionInvoiceState,
)

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def default_plans(settings: Settings) -> dict[int, Plan]:
    return {
        1: Plan(1, "Basic Monthly", 500.0, PlanKind.MONTHLY, ("F1", "F2"), 7, settings.annual_discount),
        2: Plan(2, "Premium Annual", 450.0, PlanKind.ANNUAL, ("F1", "F2", "F3"), 14, settings.annual_discount),
    }


class BillingService:
    def __init__(self, settings: Settings | None = None, plans: dict[int, Plan] | None = None):
        self.settings = settings or get_settings()
        self._plans = plans if plans is not None else default_plans(self.settings)
        self._subscribers: dict[int, Subscriber] = {}
        self._invoices: list[SubscriptionInvoice] = []
        self._next_invoice_no = self.settings.invoice_start_number
        self.total_revenue = 0.0

    # ---------- Plans ----------

    def plans(self) -> list[Plan]:
        return list(self._plans.values())

    def get_plan(self, code: int) -> Plan:
        plan = self._plans.get(code)
        if plan is None:
            valid = ", ".join(str(c) for c in self._plans)
            raise InvalidArgument(f"Unknown plan code {code} (valid: {valid}).")
        return plan

    # ---------- Subscribers ----------

    def add_subscriber(self, subscriber_id: int, name: str, email: str, plan_code: int) -> Subscriber:
        if subscriber_id in self._subscribers:
            raise InvalidArgument(f"Subscriber {subscriber_id} already exists.")
        if not name.strip():
            raise InvalidArgument("Subscriber name is required.")
        if not EMAIL_RE.match(email.strip()):
            raise InvalidArgument(f"Invalid email address: {email!r}.")
        plan = self.get_plan(plan_code)

        sub = Subscriber(subscriber_id, name.strip(), email.strip(), plan)
        self._subscribers[subscriber_id] = sub
        logger.info("Added subscriber %s on plan %s", subscriber_id, plan.name)
        return sub

    def get_subscriber(self, subscriber_id: int) -> Subscriber:
        sub = self._subscribers.get(subscriber_id)
        if sub is None:
            raise InvalidArgument(f"Subscriber {subscriber_id} not found.")
        return sub

    def subscribers(self) -> list[Subscriber]:
        return list(self._subscribers.values())

    def change_plan(self, subscriber_id: int, plan_code: int) -> Subscriber:
        sub = self.get_subscriber(subscriber_id)
        sub.plan = self.get_plan(plan_code)
        logger.info("Subscriber %s changed to %s", subscriber_id, sub.plan.name)
        return sub

    def cancel_subscription(self, subscriber_id: int) -> Subscriber:
        sub = self.get_subscriber(subscriber_id)
        if sub.status is SubscriberStatus.CANCELLED:
            logger.warning("Subscriber %s is already cancelled", subscriber_id)
            return sub
        sub.status = SubscriberStatus.CANCELLED
        logger.info("Subscriber %s cancelled", subscriber_id)
        return sub

    # ---------- Invoices ----------

    def generate_invoice(self, subscriber_id: int, today: date | None = None) -> SubscriptionInvoice:
        sub = self.get_subscriber(subscriber_id)
        issued = today or date.today()

        inv = SubscriptionInvoice(
            number=self._next_invoice_no,
            subscriber_id=sub.id,
            amount=sub.plan.compute_amount(),
            issued_on=issued,
            due_date=issued + timedelta(days=self.settings.invoice_due_days),
        )
        self._next_invoice_no += 1
        self._invoices.append(inv)
        logger.info("Generated %s", inv)
        return inv

    def find_invoice(self, invoice_no: int) -> SubscriptionInvoice | None:
        for inv in self._invoices:
            if inv.number == invoice_no:
                return inv
        return None

    def record_payment(self, invoice_no: int, today: date | None = None) -> SubscriptionInvoice | None:
        """
        Mark an invoice as paid and add its amount to revenue.
        Returns None (without raising) when the invoice number is unknown.
        Paying an already-paid invoice changes nothing.
        """
        inv = self.find_invoice(invoice_no)
        if inv is None:
            logger.warning("Invoice #%s not found", invoice_no)
            return None
        if inv.state is SubscriptionInvoiceState.PAID:
            logger.warning("Invoice #%s is already paid", invoice_no)
            return inv

        inv.mark_paid(today or date.today())
        self.total_revenue += inv.amount
        logger.info("Payment recorded for invoice #%s", invoice_no)
        return inv

    def mark_overdue(self, today: date | None = None) -> list[SubscriptionInvoice]:
        # Keep states consistent with due dates
        today = today or date.today()
        changed = []
        for inv in self._invoices:
            if inv.state is SubscriptionInvoiceState.PENDING and inv.due_date < today:
                inv.mark_overdue()
                changed.append(inv)
        if changed:
            logger.info("Marked %d invoice(s) overdue", len(changed))
        return changed

    def invoices(self) -> list[SubscriptionInvoice]:
        return list(self._invoices)
