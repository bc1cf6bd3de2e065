"""Templated email delivery through the Resend REST API."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping

import requests
from requests.adapters import HTTPAdapter
from sqlalchemy.orm import Session
from urllib3.util.retry import Retry

from lottopool.errors import EmailDeliveryError
from lottopool.models.email import EmailLog, EmailTemplate
from lottopool.repositories.email_repository import EmailRepository

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def render_template(text: str, variables: Mapping[str, Any]) -> str:
    """Replace ``{{key}}`` placeholders; unknown keys are left as-is."""

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in variables and variables[key] is not None:
            return str(variables[key])
        return match.group(0)

    return _PLACEHOLDER.sub(_sub, text)


def _build_http_session(retries: int, backoff_factor: float) -> requests.Session:
    # Sends carry an Idempotency-Key, so POST is safe to retry.
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff_factor,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("POST",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)

    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class ResendClient:
    """Minimal client for ``POST /emails``."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.resend.com/emails",
        timeout_seconds: float = 10.0,
        retries: int = 2,
        backoff_factor: float = 0.5,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._timeout = timeout_seconds
        self._http = _build_http_session(retries, backoff_factor)

    def send(
        self,
        *,
        from_email: str,
        to: str,
        subject: str,
        html: str,
        idempotency_key: str | None = None,
    ) -> str | None:
        """Send one message and return the provider message id."""

        headers = {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        try:
            resp = self._http.post(
                self._api_url,
                json={"from": from_email, "to": [to], "subject": subject, "html": html},
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise EmailDeliveryError(f"Email request failed: {exc}") from exc

        try:
            payload: dict[str, Any] = resp.json()
        except ValueError:
            payload = {}

        if not resp.ok:
            message = payload.get("message") or resp.text or f"HTTP {resp.status_code}"
            raise EmailDeliveryError(str(message), status_code=resp.status_code)

        message_id = payload.get("id")
        return str(message_id) if message_id else None


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html_body: str


class EmailService:
    """Render a stored template, send it, and log the attempt."""

    def __init__(
        self,
        client: ResendClient | None,
        *,
        from_email: str,
        template_name: str,
        enabled: bool = True,
        repository: EmailRepository | None = None,
    ) -> None:
        self._client = client
        self._from_email = from_email
        self._template_name = template_name
        self._enabled = enabled
        self._repo = repository or EmailRepository()

    @property
    def enabled(self) -> bool:
        return self._enabled and self._client is not None

    def get_template(self, session: Session) -> EmailTemplate | None:
        if not self.enabled:
            return None
        return self._repo.get_active_template(session, self._template_name)

    @staticmethod
    def render(template: EmailTemplate, variables: Mapping[str, Any]) -> RenderedEmail:
        return RenderedEmail(
            subject=render_template(template.subject, variables),
            html_body=render_template(template.html_body, variables),
        )

    def send_templated(
        self,
        session: Session,
        template: EmailTemplate,
        *,
        to: str,
        variables: Mapping[str, Any],
        triggered_by: str,
        idempotency_key: str | None = None,
    ) -> EmailLog:
        """Send one email; the returned log row records success or failure.

        Provider errors are captured in the log rather than raised.
        """

        if self._client is None:
            raise RuntimeError("Email channel is not configured")

        rendered = self.render(template, variables)
        message_id: str | None = None
        error_message: str | None = None
        try:
            message_id = self._client.send(
                from_email=self._from_email,
                to=to,
                subject=rendered.subject,
                html=rendered.html_body,
                idempotency_key=idempotency_key,
            )
            status = "sent"
        except EmailDeliveryError as exc:
            status = "failed"
            error_message = exc.message
            logger.warning("Email to %s failed: %s", to, exc.message)

        return self._repo.create_log(
            session,
            template_id=template.id,
            template_name=template.name,
            to_email=to,
            from_email=self._from_email,
            subject=rendered.subject,
            html_body=rendered.html_body,
            variables={k: (str(v) if v is not None else None) for k, v in variables.items()},
            provider_message_id=message_id,
            status=status,
            error_message=error_message,
            triggered_by=triggered_by,
        )
