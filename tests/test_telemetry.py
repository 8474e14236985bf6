"""Tests for Sentry event redaction and the metrics exposition."""

from prediction_league.telemetry import get_metrics_text, record_email, record_job_run
from prediction_league.telemetry.sentry import REDACTED, redact_event


class TestRedactEvent:
    def test_credentials_and_login_tokens(self):
        event = {
            "request": {
                "url": "https://league.test/login/AbC123xyz",
                "headers": {"Authorization": "Basic YWRtaW46c2VjcmV0", "Accept": "application/json"},
                "data": {"password": "x"},
            }
        }

        redacted = redact_event(event, {})

        assert redacted["request"]["url"] == f"https://league.test/login/{REDACTED}"
        assert redacted["request"]["headers"] == {"Authorization": REDACTED, "Accept": "application/json"}
        assert "data" not in redacted["request"]

    def test_email_addresses_in_messages(self):
        event = {"logentry": {"message": "Send failed to=alpha@example.test: boom"}}

        redacted = redact_event(event, {})

        assert redacted["logentry"]["message"] == f"Send failed to={REDACTED}: boom"


class TestMetrics:
    def test_exposition_includes_recorded_series(self):
        record_job_run("token_reaper", "ok", 12.5)
        record_email("sent", 0)

        content, content_type = get_metrics_text()
        text = content.decode() if isinstance(content, bytes) else content

        assert content_type.startswith("text/plain")
        assert 'league_job_runs_total{job="token_reaper",status="ok"}' in text
        assert 'league_emails_total{outcome="sent"}' in text
