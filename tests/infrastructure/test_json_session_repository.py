"""Tests for the JSON-file session and the settings it is configured by."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from dealcart.domain.model.customer import Customer
from dealcart.infrastructure.config import Settings
from dealcart.infrastructure.persistence.json_session_repository import (
    JsonSessionRepository,
)


class TestJsonSessionRepository:

    def test_creates_missing_file(self, tmp_path):
        path = tmp_path / "nested" / "session.json"
        repo = JsonSessionRepository(path)
        assert path.read_text(encoding="utf-8") == "{}"
        assert repo.current_customer() is None

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "session.json"
        JsonSessionRepository(path).save(Customer(id="c1", phone="012", name="Aisyah"))
        assert JsonSessionRepository(path).current_customer() == Customer("c1", "012", "Aisyah")

    def test_clear(self, tmp_path):
        repo = JsonSessionRepository(tmp_path / "session.json")
        repo.save(Customer(id="c1"))
        repo.clear()
        assert repo.current_customer() is None


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("DEALCART_API_BASE_URL", "DEALCART_POLL_INTERVAL", "DEALCART_LANGUAGE"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.cart_path == "/jomfood-deals/cart"
        assert settings.poll_interval == 3.0
        assert settings.language == "en"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DEALCART_API_BASE_URL", "https://api.example/v1")
        monkeypatch.setenv("DEALCART_SESSION_FILE", str(tmp_path / "s.json"))
        monkeypatch.setenv("DEALCART_LANGUAGE", "malay")
        settings = Settings(_env_file=None)
        assert settings.api_base_url == "https://api.example/v1"
        assert settings.session_file == Path(tmp_path / "s.json")
        assert settings.language == "malay"

    def test_poll_interval_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("DEALCART_POLL_INTERVAL", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
