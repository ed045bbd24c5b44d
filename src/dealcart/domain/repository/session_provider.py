"""Abstract accessor for the authenticated customer.

Cart operations need to know who is signed in, but signing in (and the
tokens behind it) belongs to another part of the application.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dealcart.domain.model.customer import Customer


class SessionProvider(ABC):

    @abstractmethod
    def current_customer(self) -> Customer | None:
        """Return the signed-in customer, or None for a guest."""
