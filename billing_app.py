"""
billing_app.py
Console Subscription Billing Manager.
Run: python billing_app.py
"""

from __future__ import annotations

import logging
from typing import Callable

import config
import utils
from billing import BillingService
from models import InvalidArgument

logger = logging.getLogger(__name__)

Reader = Callable[[str], str]

MENU = """
==== MENU ====
1. Add Subscriber
2. Change Plan
3. Cancel Subscription
4. Generate Invoice
5. Record Payment
6. Show All Invoices
7. Show Revenue Report
0. Exit"""


def choose_plan(billing: BillingService, read: Reader) -> int:
    options = "  ".join(f"{p.plan_id}.{p.name}" for p in billing.plans())
    code = utils.parse_int(read(f"Choose Plan: {options}: "), "Plan code")
    billing.get_plan(code)  # rejects unknown codes
    return code


def add_subscriber(billing: BillingService, read: Reader) -> None:
    sid = utils.parse_int(read("Enter ID: "), "Subscriber ID")
    name = read("Enter Name: ")
    email = read("Enter Email: ")
    code = choose_plan(billing, read)
    sub = billing.add_subscriber(sid, name, email, code)
    print(f"Subscriber Added! {sub.name} on {sub.plan.label()}")


def change_plan(billing: BillingService, read: Reader) -> None:
    sid = utils.parse_int(read("Enter Subscriber ID: "), "Subscriber ID")
    billing.get_subscriber(sid)
    sub = billing.change_plan(sid, choose_plan(billing, read))
    print(f"{sub.name} changed to {sub.plan.name}")


def cancel_subscription(billing: BillingService, read: Reader) -> None:
    sid = utils.parse_int(read("Enter Subscriber ID: "), "Subscriber ID")
    sub = billing.cancel_subscription(sid)
    print(f"{sub.name}'s subscription cancelled.")


def generate_invoice(billing: BillingService, read: Reader) -> None:
    sid = utils.parse_int(read("Enter Subscriber ID: "), "Subscriber ID")
    inv = billing.generate_invoice(sid)
    print(f"Generated {inv}")


def record_payment(billing: BillingService, read: Reader) -> None:
    number = utils.parse_int(read("Enter Invoice No: "), "Invoice number")
    inv = billing.record_payment(number)
    if inv is None:
        print("Invoice not found!")
    else:
        print(f"Payment done for Invoice#{inv.number} ({inv.state.value})")


def show_invoices(billing: BillingService, read: Reader) -> None:
    billing.mark_overdue()
    df = utils.invoices_frame(billing.invoices())
    if df.empty:
        print("No invoices yet.")
    else:
        print(df.to_string(index=False))


def show_revenue_report(billing: BillingService, read: Reader) -> None:
    print(utils.billing_overview(billing))
    print(f"Total Revenue: {billing.total_revenue:.2f}")
    df = utils.revenue_summary_by_month(billing.invoices())
    if not df.empty:
        print(df.to_string(index=False))


ACTIONS: dict[str, Callable[[BillingService, Reader], None]] = {
    "1": add_subscriber,
    "2": change_plan,
    "3": cancel_subscription,
    "4": generate_invoice,
    "5": record_payment,
    "6": show_invoices,
    "7": show_revenue_report,
}


def run(billing: BillingService | None = None, read: Reader = input) -> BillingService:
    billing = billing or BillingService()

    while True:
        print(MENU)
        try:
            choice = read("Choose option: ").strip()
        except EOFError:
            choice = "0"

        if choice == "0":
            print("Exiting...")
            return billing

        action = ACTIONS.get(choice)
        if action is None:
            print("Invalid choice!")
            continue
        try:
            action(billing, read)
        except EOFError:
            print("\nInput ended.")
            print("Exiting...")
            return billing
        except InvalidArgument as e:
            logger.debug("Rejected menu option %s: %s", choice, e)
            print(f"Error: {e}")


def main() -> None:
    config.configure_logging()
    run()


if __name__ == "__main__":
    main()
