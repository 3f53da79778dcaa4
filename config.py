# config.py - settings read once from the environment (.env supported)
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

DEFAULT_WHATSAPP_API_URL = "https://graph.facebook.com/v18.0"


@dataclass(frozen=True)
class Settings:
    database_url: str
    whatsapp_access_token: Optional[str] = None
    whatsapp_webhook_token: Optional[str] = None
    whatsapp_phone_number_id: Optional[str] = None
    whatsapp_business_account_id: Optional[str] = None
    whatsapp_api_url: str = DEFAULT_WHATSAPP_API_URL
    whatsapp_send_delay: float = 1.0
    log_level: str = "INFO"


def load_settings(environ=None) -> Settings:
    """Build Settings from the process environment; raise RuntimeError on bad values."""
    if environ is None:
        load_dotenv()
        environ = os.environ

    database_url = environ.get("DATABASE_URL")
    if not database_url:
        raise RuntimeError("Set DATABASE_URL in .env")

    raw_delay = environ.get("WHATSAPP_SEND_DELAY", "1.0")
    try:
        send_delay = float(raw_delay)
    except ValueError:
        raise RuntimeError(f"WHATSAPP_SEND_DELAY must be a number, got {raw_delay!r}")
    if send_delay < 0:
        raise RuntimeError("WHATSAPP_SEND_DELAY must not be negative")

    return Settings(
        database_url=database_url,
        whatsapp_access_token=environ.get("WHATSAPP_ACCESS_TOKEN") or None,
        whatsapp_webhook_token=environ.get("WHATSAPP_WEBHOOK_TOKEN") or None,
        whatsapp_phone_number_id=environ.get("WHATSAPP_PHONE_NUMBER_ID") or None,
        whatsapp_business_account_id=environ.get("WHATSAPP_BUSINESS_ACCOUNT_ID") or None,
        whatsapp_api_url=environ.get("WHATSAPP_API_URL") or DEFAULT_WHATSAPP_API_URL,
        whatsapp_send_delay=send_delay,
        log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
    )
