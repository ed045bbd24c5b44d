"""Composition root for the cart application.

Builds the settings, the HTTP cart client, the session file and the console
adapters, and hands them to the use cases.  Tests swap pieces out by
patching the factory functions below.
"""

from __future__ import annotations

from dataclasses import dataclass

from dealcart.application.cart_store import CartStore
from dealcart.application.checkout import CheckoutOrchestrator
from dealcart.application.payment_poller import PaymentPoller
from dealcart.application.ports import CheckoutNavigator, ClaimHistoryCache, Notifier
from dealcart.domain.model.payment import PaymentSession
from dealcart.domain.repository.cart_service import CartService
from dealcart.infrastructure.cli.console import (
    ConsoleNavigator,
    ConsoleNotifier,
    LoggingClaimHistoryCache,
)
from dealcart.infrastructure.config import Settings, load_settings
from dealcart.infrastructure.http.cart_client import HttpCartService
from dealcart.infrastructure.persistence.json_session_repository import (
    JsonSessionRepository,
)
from dealcart.infrastructure.scheduler import AsyncioScheduler


def settings() -> Settings:
    return load_settings()


def session_repository(config: Settings | None = None) -> JsonSessionRepository:
    config = config or settings()
    return JsonSessionRepository(config.session_file)


def cart_service(config: Settings | None = None) -> CartService:
    config = config or settings()
    return HttpCartService(
        base_url=config.api_base_url,
        cart_path=config.cart_path,
        timeout=config.request_timeout,
        token_provider=lambda: config.access_token,
        language=config.language,
    )


@dataclass
class CartApp:
    """Everything a front end needs, wired together for one run."""

    config: Settings
    cart_service: CartService
    session: JsonSessionRepository
    notifier: Notifier
    navigator: CheckoutNavigator
    claim_history: ClaimHistoryCache
    cart_store: CartStore
    checkout: CheckoutOrchestrator

    def payment_poller(self, payment: PaymentSession) -> PaymentPoller:
        return PaymentPoller(
            payment=payment,
            cart_service=self.cart_service,
            cart_store=self.cart_store,
            claim_history=self.claim_history,
            scheduler=AsyncioScheduler(),
            interval=self.config.poll_interval,
        )

    async def aclose(self) -> None:
        if isinstance(self.cart_service, HttpCartService):
            await self.cart_service.aclose()


def build_app() -> CartApp:
    config = settings()
    service = cart_service(config)
    session = session_repository(config)
    notifier = ConsoleNotifier()
    navigator = ConsoleNavigator()
    store = CartStore(service, session, notifier)
    return CartApp(
        config=config,
        cart_service=service,
        session=session,
        notifier=notifier,
        navigator=navigator,
        claim_history=LoggingClaimHistoryCache(),
        cart_store=store,
        checkout=CheckoutOrchestrator(store, service, session, notifier, navigator),
    )
