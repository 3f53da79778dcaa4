import pytest
from config import DEFAULT_WHATSAPP_API_URL, load_settings


def test_defaults():
    settings = load_settings({"DATABASE_URL": "sqlite://"})
    assert settings.database_url == "sqlite://"
    assert settings.whatsapp_webhook_token is None
    assert settings.whatsapp_api_url == DEFAULT_WHATSAPP_API_URL
    assert settings.whatsapp_send_delay == 1.0
    assert settings.log_level == "INFO"


def test_reads_whatsapp_values():
    settings = load_settings({
        "DATABASE_URL": "postgresql://localhost/akademyx",
        "WHATSAPP_WEBHOOK_TOKEN": "tok",
        "WHATSAPP_ACCESS_TOKEN": "access",
        "WHATSAPP_PHONE_NUMBER_ID": "1055",
        "WHATSAPP_SEND_DELAY": "0.25",
        "LOG_LEVEL": "debug",
    })
    assert settings.whatsapp_webhook_token == "tok"
    assert settings.whatsapp_access_token == "access"
    assert settings.whatsapp_phone_number_id == "1055"
    assert settings.whatsapp_send_delay == 0.25
    assert settings.log_level == "DEBUG"


def test_database_url_required():
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        load_settings({})


@pytest.mark.parametrize("delay", ["soon", "-1"])
def test_bad_send_delay(delay):
    with pytest.raises(RuntimeError, match="WHATSAPP_SEND_DELAY"):
        load_settings({"DATABASE_URL": "sqlite://", "WHATSAPP_SEND_DELAY": delay})


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
