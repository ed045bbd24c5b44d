"""JSON-file-backed session: who is signed in on this machine.

Implements SessionProvider for the command-line front end.  The file
holds the customer only; tokens are configured separately.
"""

from __future__ import annotations

import json
from pathlib import Path

from dealcart.domain.model.customer import Customer
from dealcart.domain.repository.session_provider import SessionProvider


class JsonSessionRepository(SessionProvider):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- SessionProvider interface --------------------------------------------

    def current_customer(self) -> Customer | None:
        raw = self._load()
        if not raw or not raw.get("id"):
            return None
        return Customer(id=raw["id"], phone=raw.get("phone"), name=raw.get("name"))

    # --- Session lifecycle ----------------------------------------------------

    def save(self, customer: Customer) -> None:
        self._persist({"id": customer.id, "phone": customer.phone, "name": customer.name})

    def clear(self) -> None:
        self._persist({})

    # --- File helpers ---------------------------------------------------------

    def _load(self) -> dict:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist(self, raw: dict) -> None:
        self._file_path.write_text(json.dumps(raw, indent=2) + "\n", encoding="utf-8")

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("{}", encoding="utf-8")
