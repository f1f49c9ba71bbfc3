from __future__ import annotations

from datetime import date, timedelta

import pytest

from billing import BillingService
from models import InvalidArgument, Plan, PlanKind, SubscriberStatus, SubscriptionInvoiceState


def _service_with_subscriber(plan_code: int = 1) -> BillingService:
    billing = BillingService()
    billing.add_subscriber(7, "Asha", "asha@example.com", plan_code)
    return billing


@pytest.mark.parametrize("price", [0.0, 99.99, 450.0, 500.0, 1234.5])
def test_monthly_plan_charges_base_price(price):
    plan = Plan(1, "M", price, PlanKind.MONTHLY)
    assert plan.compute_amount() == price


@pytest.mark.parametrize("price", [0.0, 99.99, 450.0, 500.0, 1234.5])
def test_annual_plan_charges_twelve_months_less_ten_percent(price):
    plan = Plan(2, "A", price, PlanKind.ANNUAL)
    assert plan.compute_amount() == pytest.approx(price * 12 * 0.9)


def test_default_catalog_amounts():
    billing = BillingService()
    assert billing.get_plan(1).compute_amount() == 500.0
    assert billing.get_plan(2).compute_amount() == pytest.approx(4860.0)


def test_unknown_plan_code_is_rejected():
    billing = BillingService()
    with pytest.raises(InvalidArgument, match="Unknown plan code"):
        billing.add_subscriber(1, "Asha", "asha@example.com", 3)
    assert billing.subscribers() == []


def test_add_subscriber_validation():
    billing = _service_with_subscriber()
    with pytest.raises(InvalidArgument, match="already exists"):
        billing.add_subscriber(7, "Other", "other@example.com", 1)
    with pytest.raises(InvalidArgument, match="name"):
        billing.add_subscriber(8, "  ", "other@example.com", 1)
    with pytest.raises(InvalidArgument, match="email"):
        billing.add_subscriber(8, "Other", "not-an-email", 1)


def test_change_plan_replaces_reference_and_affects_next_invoice():
    billing = _service_with_subscriber(plan_code=1)
    first = billing.generate_invoice(7)

    billing.change_plan(7, 2)
    second = billing.generate_invoice(7)

    assert billing.get_subscriber(7).plan.kind is PlanKind.ANNUAL
    assert first.amount == 500.0
    assert second.amount == pytest.approx(4860.0)


def test_cancel_is_one_way_and_idempotent():
    billing = _service_with_subscriber()
    billing.cancel_subscription(7)
    billing.cancel_subscription(7)
    assert billing.get_subscriber(7).status is SubscriberStatus.CANCELLED


def test_unknown_subscriber_is_rejected():
    billing = BillingService()
    with pytest.raises(InvalidArgument, match="not found"):
        billing.generate_invoice(42)


def test_invoice_numbers_start_at_1000_and_increase():
    billing = _service_with_subscriber()
    numbers = [billing.generate_invoice(7).number for _ in range(5)]
    assert numbers == [1000, 1001, 1002, 1003, 1004]


def test_invoice_counters_are_per_service():
    a = _service_with_subscriber()
    b = _service_with_subscriber()
    a.generate_invoice(7)
    assert b.generate_invoice(7).number == 1000


def test_generated_invoice_is_pending_and_due_in_15_days():
    billing = _service_with_subscriber()
    inv = billing.generate_invoice(7, today=date(2024, 1, 20))
    assert inv.state is SubscriptionInvoiceState.PENDING
    assert inv.due_date == date(2024, 2, 4)
    assert billing.invoices() == [inv]


def test_invoice_amount_is_snapshotted():
    billing = _service_with_subscriber(plan_code=1)
    inv = billing.generate_invoice(7)
    billing.change_plan(7, 2)
    assert inv.amount == 500.0


def test_record_payment_is_idempotent():
    billing = _service_with_subscriber()
    inv = billing.generate_invoice(7)

    assert billing.record_payment(inv.number, today=date(2024, 3, 1)) is inv
    assert billing.record_payment(inv.number) is inv

    assert inv.state is SubscriptionInvoiceState.PAID
    assert inv.paid_on == date(2024, 3, 1)
    assert billing.total_revenue == 500.0


def test_record_payment_unknown_invoice_returns_none():
    billing = _service_with_subscriber()
    billing.generate_invoice(7)
    assert billing.record_payment(999) is None
    assert billing.total_revenue == 0.0


def test_mark_overdue_only_touches_pending_past_due():
    billing = _service_with_subscriber()
    issued = date(2024, 1, 1)
    paid = billing.generate_invoice(7, today=issued)
    late = billing.generate_invoice(7, today=issued)
    fresh = billing.generate_invoice(7, today=issued + timedelta(days=30))
    billing.record_payment(paid.number, today=issued)

    changed = billing.mark_overdue(today=date(2024, 1, 20))

    assert changed == [late]
    assert paid.state is SubscriptionInvoiceState.PAID
    assert late.state is SubscriptionInvoiceState.OVERDUE
    assert fresh.state is SubscriptionInvoiceState.PENDING


def test_overdue_invoice_can_still_be_paid():
    billing = _service_with_subscriber()
    inv = billing.generate_invoice(7, today=date(2024, 1, 1))
    billing.mark_overdue(today=date(2024, 2, 1))

    billing.record_payment(inv.number, today=date(2024, 2, 2))

    assert inv.state is SubscriptionInvoiceState.PAID
    assert billing.total_revenue == 500.0


def test_mark_overdue_never_overrides_paid():
    billing = _service_with_subscriber()
    inv = billing.generate_invoice(7, today=date(2024, 1, 1))
    billing.record_payment(inv.number)
    inv.mark_overdue()
    assert inv.state is SubscriptionInvoiceState.PAID
