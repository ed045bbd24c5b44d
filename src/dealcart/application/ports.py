"""Abstract collaborators the use cases call out to.

These are the seams towards whatever front end hosts the cart: how
messages reach the customer, where navigation goes, which caches need
invalidating, and how periodic work is scheduled.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from dealcart.domain.model.payment import PaymentSession


class Notifier(ABC):
    """User-visible notifications (toasts, console messages...)."""

    @abstractmethod
    def error(self, title: str, message: str) -> None: ...

    @abstractmethod
    def info(self, title: str, message: str) -> None: ...

    @abstractmethod
    def success(self, title: str, message: str) -> None: ...


class ClaimHistoryCache(ABC):

    @abstractmethod
    def invalidate(self) -> None:
        """Drop any cached view of the customer's claimed deals."""


class CheckoutNavigator(ABC):

    @abstractmethod
    def open_payment_redirect(self, payment: PaymentSession) -> None:
        """Hand the customer to the external payment page."""

    @abstractmethod
    def open_payment_status(self, payment: PaymentSession) -> None:
        """Show the settlement screen that polls the payment status."""

    @abstractmethod
    def open_profile_completion(self) -> None:
        """Ask the customer to complete their profile (phone number)."""


class ScheduledHandle(ABC):

    @abstractmethod
    def cancel(self) -> None:
        """Stop future runs.  Safe to call more than once."""


class Scheduler(ABC):

    @abstractmethod
    def every(
        self, interval: float, callback: Callable[[], Awaitable[None]]
    ) -> ScheduledHandle:
        """Run *callback* every *interval* seconds until the handle is cancelled.

        The first run happens one interval from now.
        """
