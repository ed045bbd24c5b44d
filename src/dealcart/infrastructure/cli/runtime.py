"""Runs async use cases from synchronous click commands."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from dealcart.infrastructure import bootstrap

T = TypeVar("T")


def run(work: Callable[[bootstrap.CartApp], Awaitable[T]]) -> T:
    """Build the app, run *work* on a fresh event loop, always close the client."""

    async def main() -> T:
        app = bootstrap.build_app()
        try:
            return await work(app)
        finally:
            await app.aclose()

    return asyncio.run(main())
