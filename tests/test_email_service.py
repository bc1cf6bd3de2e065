from unittest import mock

import pytest
import requests

from lottopool.errors import EmailDeliveryError
from lottopool.models import EmailLog, EmailTemplate
from lottopool.services.email_service import EmailService, ResendClient, render_template

from .conftest import FakeEmailClient


def _response(status_code, payload):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


def test_render_template_fills_known_placeholders():
    assert render_template("{{pool_name}} won {{total_amount}}", {"pool_name": "Office", "total_amount": "$7.00"}) == (
        "Office won $7.00"
    )


def test_render_template_leaves_unknown_placeholders():
    assert render_template("Hi {{member_name}} {{ nope }} {{missing}}", {"member_name": "Ana"}) == (
        "Hi Ana {{ nope }} {{missing}}"
    )


def test_resend_client_returns_message_id():
    client = ResendClient("re_test", api_url="https://mail.example.com/emails", timeout_seconds=3)

    with mock.patch.object(client._http, "post", return_value=_response(200, {"id": "abc123"})) as post:
        message_id = client.send(
            from_email="Pool <noreply@example.com>",
            to="ana@example.com",
            subject="Hi",
            html="<p>Hi</p>",
            idempotency_key="win-1",
        )

    assert message_id == "abc123"
    _, kwargs = post.call_args
    assert post.call_args[0][0] == "https://mail.example.com/emails"
    assert kwargs["json"] == {
        "from": "Pool <noreply@example.com>",
        "to": ["ana@example.com"],
        "subject": "Hi",
        "html": "<p>Hi</p>",
    }
    assert kwargs["headers"]["Authorization"] == "Bearer re_test"
    assert kwargs["headers"]["Idempotency-Key"] == "win-1"
    assert kwargs["timeout"] == 3


def test_resend_client_raises_provider_error():
    client = ResendClient("re_test")

    with mock.patch.object(client._http, "post", return_value=_response(422, {"message": "Invalid `to` field"})):
        with pytest.raises(EmailDeliveryError) as excinfo:
            client.send(from_email="a@example.com", to="bad", subject="s", html="h")

    assert excinfo.value.message == "Invalid `to` field"
    assert excinfo.value.status_code == 422


def test_resend_client_wraps_network_errors():
    client = ResendClient("re_test")

    with mock.patch.object(client._http, "post", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(EmailDeliveryError, match="refused"):
            client.send(from_email="a@example.com", to="b@example.com", subject="s", html="h")


def test_email_service_disabled_without_client(session, win_template):
    service = EmailService(None, from_email="a@example.com", template_name="win_notification")

    assert service.enabled is False
    assert service.get_template(session) is None


def test_email_service_picks_highest_active_version(session, win_template):
    session.add(EmailTemplate(name="win_notification", version=2, subject="v2", html_body="b", is_active=True))
    session.add(EmailTemplate(name="win_notification", version=3, subject="v3", html_body="b", is_active=False))
    session.commit()
    service = EmailService(FakeEmailClient(), from_email="a@example.com", template_name="win_notification")

    assert service.get_template(session).subject == "v2"


def test_send_templated_logs_failure_instead_of_raising(session, win_template):
    client = FakeEmailClient(fail_for={"ana@example.com"})
    service = EmailService(client, from_email="Pool <noreply@example.com>", template_name="win_notification")

    entry = service.send_templated(
        session,
        win_template,
        to="ana@example.com",
        variables={"pool_name": "Office", "total_amount": "$7.00"},
        triggered_by="test",
    )
    session.commit()

    assert entry.status == "failed"
    assert entry.error_message == "Mailbox unavailable"
    assert entry.subject == "Office won $7.00"
    assert entry.provider_message_id is None
    assert session.get(EmailLog, entry.id).variables == {"pool_name": "Office", "total_amount": "$7.00"}
