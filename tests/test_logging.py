"""Tests for log redaction."""

import pytest
import structlog

from onetime.platform.logging import REDACTED, log_audit_event, mask_emails, redact_sensitive

pytestmark = pytest.mark.unit


def test_mask_emails():
    assert mask_emails("sent to alice@example.com") == "sent to ***@example.com"
    assert mask_emails("no address here") == "no address here"


def test_sensitive_fields_blanked():
    event = redact_sensitive(
        None,
        "info",
        {"event": "secret.created", "passphrase": "opensesame", "secret_value": "launch codes", "ttl": 60},
    )
    assert event["passphrase"] == REDACTED
    assert event["secret_value"] == REDACTED
    assert event["ttl"] == 60
    assert event["event"] == "secret.created"


def test_emails_masked_in_nested_values():
    event = redact_sensitive(
        None,
        "info",
        {
            "event": "account.created for bob@example.org",
            "details": {"custid": "bob@example.org", "value": "hunter2"},
            "recipients": ["carol@example.net"],
        },
    )
    assert event["event"] == "account.created for ***@example.org"
    assert event["details"] == {"custid": "***@example.org", "value": REDACTED}
    assert event["recipients"] == ["***@example.net"]


def test_audit_event_fields():
    with structlog.testing.capture_logs() as logs:
        log_audit_event(
            "rate_limit.cleared",
            category="rate_limit",
            resource_type="limiter",
            resource_id="owner@example.com:create_secret",
        )
    assert logs[0]["audit_category"] == "rate_limit"
    assert logs[0]["event"] == "rate_limit.cleared"
    assert logs[0]["audit_resource_id"] == "owner@example.com:create_secret"
    assert redact_sensitive(None, "info", logs[0])["audit_resource_id"] == "***@example.com:create_secret"
