from taskdesk.config import Settings

ORIGIN = "http://testserver"

CSRF_HEADERS = {"Origin": ORIGIN, "X-CSRF-Token": "1"}


def make_settings(**overrides) -> Settings:
    values = {
        "google_client_id": "",
        "google_client_secret": "",
        "session_secret": "test-session-secret",
        "csrf_allowed_origins": [ORIGIN],
    }
    values.update(overrides)
    return Settings(**values)
