"""
Dispatch coordinator.

Sends every notification of a request concurrently, waits until all of them
have settled, and turns any failure into one UpstreamFailure for the route.

Design decisions:
- asyncio.gather over the shared transport; no ordering between the admin
  and customer emails
- All-or-nothing towards the caller: one failed send fails the request.
  Per-recipient outcomes are kept on the report and logged, not returned
- A single attempt per notification: no retry, no backoff, no queue
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from shared.channels import DeliveryResult, MailTransport
from shared.errors import UpstreamFailure
from shared.models import Notification

logger = logging.getLogger("relay.dispatch")

DEFAULT_FAILURE_MESSAGE = "Failed to send notification"


@dataclass(frozen=True)
class DeliveryOutcome:
    """What happened to one notification."""
    recipient: str
    subject: str
    success: bool
    error: Optional[str] = None


@dataclass
class DispatchReport:
    """Outcomes of one dispatch, in the order the notifications were given."""
    outcomes: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return all(o.success for o in self.outcomes)

    @property
    def failures(self) -> list[DeliveryOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def recipients(self) -> list[str]:
        return [o.recipient for o in self.outcomes]


class DispatchCoordinator:
    """
    Concurrent all-or-nothing sender.

    Example:
        coordinator = DispatchCoordinator(transport)
        report = await coordinator.dispatch(notifications)
    """

    def __init__(self, transport: MailTransport):
        self.transport = transport

    async def dispatch(
        self,
        notifications: Sequence[Notification],
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
    ) -> DispatchReport:
        """
        Send all notifications and wait for every one of them.

        Args:
            notifications: Emails to send
            failure_message: Client-facing message if any send fails

        Returns:
            DispatchReport when every send succeeded

        Raises:
            UpstreamFailure: If at least one send failed, after all have settled
        """
        results = await asyncio.gather(
            *(self.transport.send(n) for n in notifications),
            return_exceptions=True,
        )

        report = DispatchReport()
        for notification, result in zip(notifications, results):
            report.outcomes.append(self._outcome(notification, result))

        if report.failures:
            for failure in report.failures:
                logger.warning(f"Delivery to {failure.recipient} failed: {failure.error}")
            logger.error(
                f"Dispatch failed: {len(report.failures)} of {len(report.outcomes)} "
                "notifications not delivered"
            )
            raise UpstreamFailure(failure_message, error=report.failures[0].error)

        logger.info(f"Dispatched {len(report.outcomes)} notification(s) to {report.recipients}")
        return report

    @staticmethod
    def _outcome(
        notification: Notification, result: Union[DeliveryResult, BaseException]
    ) -> DeliveryOutcome:
        if isinstance(result, BaseException):
            # cancellation is not a delivery failure
            if not isinstance(result, Exception):
                raise result
            return DeliveryOutcome(
                recipient=notification.recipient,
                subject=notification.subject,
                success=False,
                error=str(result) or type(result).__name__,
            )
        return DeliveryOutcome(
            recipient=notification.recipient,
            subject=notification.subject,
            success=result.success,
            error=None if result.success else (result.error or "Delivery failed"),
        )
