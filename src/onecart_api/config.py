"""Environment-driven configuration for the 1cart client and callback receiver."""

from __future__ import annotations

from datetime import timedelta

from pydantic_settings import BaseSettings

from .callback import CallbackReceiver
from .client import DEFAULT_API_URL, Client
from .models import Credentials


class Settings(BaseSettings):
    """Settings read from ONECART_* environment variables or a .env file."""

    client_id: str = ""
    signing_key: str = ""
    api_key: str = ""
    api_url: str = DEFAULT_API_URL
    timeout_s: float = 10.0

    # Replay window for callback Date headers
    callback_max_age_s: int = 300
    callback_max_skew_s: int = 60

    model_config = {"env_prefix": "ONECART_", "env_file": ".env", "extra": "ignore"}

    def credentials(self) -> Credentials:
        return Credentials(client_id=self.client_id, signing_key=self.signing_key)


def build_receiver(settings: Settings) -> CallbackReceiver:
    return CallbackReceiver(
        settings.credentials(),
        max_age=timedelta(seconds=settings.callback_max_age_s),
        max_skew=timedelta(seconds=settings.callback_max_skew_s),
    )


def build_client(settings: Settings) -> Client:
    return Client(
        client_id=settings.client_id,
        api_key=settings.api_key,
        base_url=settings.api_url,
        timeout_s=settings.timeout_s,
    )
