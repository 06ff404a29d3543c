import asyncio

import pytest

from pixelglow.infra.resend_client import ResendClient, ResendError


class _Emails:
    def __init__(self, response):
        self.response = response
        self.sent = []

    def send(self, params):
        self.sent.append(params)
        return self.response


def test_send_email_through_sdk():
    emails = _Emails({"id": "email_123"})
    client = ResendClient("re_test", emails=emails)
    result = asyncio.run(client.send_email(sender="noreply@example.com", to=["a@b.c"], subject="Hi", html="<p>x</p>"))
    assert result == {"id": "email_123"}
    assert emails.sent == [{"from": "noreply@example.com", "to": ["a@b.c"], "subject": "Hi", "html": "<p>x</p>"}]


def test_response_without_id_raises():
    client = ResendClient("re_test", emails=_Emails({"message": "invalid from"}))
    with pytest.raises(ResendError):
        asyncio.run(client.send_email(sender="x", to=["a@b.c"], subject="s", html="h"))


def test_missing_api_key():
    client = ResendClient("", emails=_Emails({"id": "never"}))
    assert not client.configured
    with pytest.raises(RuntimeError):
        asyncio.run(client.send_email(sender="x", to=["a@b.c"], subject="s", html="h"))
