"""
Centralized Email Client for service-to-service email communication.

This module provides a simple HTTP client that other services can use
to send emails through the Communications Service's centralized email API.
The Communications Service owns SMTP/provider delivery; this client only
forwards the message and reports whether it was accepted.

Usage:
    from libs.common.emails.client import get_email_client

    email_client = get_email_client()

    result = await email_client.send(
        to_email="principal@example.edu",
        subject="Day End Attendance Report",
        body="Plain text body",
        html_body="<p>HTML body</p>",
        attachments=[Path("/tmp/report.html")],
    )
    if not result.success:
        ...
"""

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger, get_run_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class EmailSendResult:
    success: bool
    message: Optional[str] = None


class EmailClient:
    """
    HTTP client for sending emails through the Communications Service.

    Never raises for delivery problems: transport errors and non-200
    responses are logged and returned as a failed ``EmailSendResult`` so
    batch callers can record them per recipient.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.COMMUNICATIONS_SERVICE_URL
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"X-Caller-Service": "attendance"}
        run_id = get_run_id()
        if run_id:
            headers["X-Request-ID"] = run_id
        return headers

    @staticmethod
    def _encode_attachment(path: Path) -> dict[str, str]:
        return {
            "filename": path.name,
            "content": base64.b64encode(path.read_bytes()).decode("ascii"),
        }

    async def send(
        self,
        to_email: str,
        subject: str,
        body: str,
        html_body: Optional[str] = None,
        to_name: Optional[str] = None,
        attachments: Optional[Sequence[Path]] = None,
    ) -> EmailSendResult:
        """
        Send a single email through the Communications Service.

        Args:
            to_email: Recipient email address
            subject: Email subject line
            body: Plain text body
            html_body: Optional HTML body
            to_name: Optional recipient display name
            attachments: Files to attach; read at call time

        Returns:
            EmailSendResult with success flag and failure message
        """
        payload: dict[str, Any] = {
            "to_email": to_email,
            "subject": subject,
            "body": body,
        }
        if html_body:
            payload["html_body"] = html_body
        if to_name:
            payload["to_name"] = to_name
        if attachments:
            payload["attachments"] = [
                self._encode_attachment(Path(p)) for p in attachments
            ]

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/email/send",
                    json=payload,
                    headers=self._headers(),
                )
        except httpx.RequestError as e:
            logger.error(f"Failed to connect to Communications Service: {e}")
            return EmailSendResult(success=False, message=f"connection error: {e}")

        if response.status_code != 200:
            logger.error(
                f"Email API returned {response.status_code}: {response.text}"
            )
            return EmailSendResult(
                success=False,
                message=f"email API returned {response.status_code}",
            )

        try:
            result = response.json()
        except ValueError:
            result = None
        if not isinstance(result, dict):
            logger.error(f"Email API returned an unreadable body: {response.text[:200]}")
            return EmailSendResult(success=False, message="unreadable email API response")

        if not result.get("success", False):
            return EmailSendResult(
                success=False, message=result.get("message") or "rejected"
            )
        return EmailSendResult(success=True)


_email_client: Optional[EmailClient] = None


def get_email_client() -> EmailClient:
    """Return the process-wide EmailClient."""
    global _email_client
    if _email_client is None:
        _email_client = EmailClient()
    return _email_client
