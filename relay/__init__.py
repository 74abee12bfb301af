"""
The relay pipeline.

validate -> (verify) -> resolve -> compose -> dispatch, shared by every route:
- validation: required-field checks and parsing into request records
- payments: signature verification and gateway order creation
- composer: turning a record into admin/customer notifications
- dispatch: concurrent, all-or-nothing delivery
- service: one method per route tying the steps together
"""

from relay.composer import NotificationComposer, Route, select_templates
from relay.dispatch import DispatchCoordinator, DispatchReport
from relay.payments import PaymentGateway, RazorpayGateway, sign, verify
from relay.service import RelayService

__all__ = [
    "NotificationComposer",
    "Route",
    "select_templates",
    "DispatchCoordinator",
    "DispatchReport",
    "PaymentGateway",
    "RazorpayGateway",
    "sign",
    "verify",
    "RelayService",
]
