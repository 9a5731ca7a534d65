"""Unit tests for logging helpers."""

from AABForge.core.logging import REDACTED, redact_secrets


class TestRedactSecrets:
    """Tests for password redaction."""

    def test_passwords_are_replaced(self):
        event = {"event": "Signing", "store_password": "s3cret", "keypass": "k3y", "keystore": "/k.jks"}
        result = redact_secrets(None, "info", event)
        assert result["store_password"] == REDACTED
        assert result["keypass"] == REDACTED
        assert result["keystore"] == "/k.jks"

    def test_event_without_secrets_is_unchanged(self):
        event = {"event": "Linked resources", "artifact": "base.zip"}
        assert redact_secrets(None, "info", dict(event)) == event
