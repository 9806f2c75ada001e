"""ReportDispatcher backed by the Communications Service email API."""

from typing import Optional

from libs.common.emails.client import EmailClient, get_email_client
from libs.common.logging import get_logger
from services.attendance_service.exceptions import DispatchError
from services.attendance_service.schemas import DispatchResult, ReportPayload
from services.attendance_service.templates.day_end_report import (
    render_day_end_report_html,
    render_day_end_report_text,
    report_file,
)

logger = get_logger(__name__)


class EmailReportDispatcher:
    def __init__(
        self,
        client: Optional[EmailClient] = None,
        reports_dir: Optional[str] = None,
    ):
        self.client = client or get_email_client()
        self.reports_dir = reports_dir

    async def send(self, payload: ReportPayload) -> DispatchResult:
        """
        Email one day-end report with the rendered HTML attached.

        Raises DispatchError when the report file cannot be prepared; a
        rejected or failed delivery is returned as ``sent=False``.
        """
        try:
            with report_file(payload, directory=self.reports_dir) as path:
                result = await self.client.send(
                    to_email=payload.recipient_email,
                    subject=payload.subject,
                    body=render_day_end_report_text(payload),
                    html_body=render_day_end_report_html(payload),
                    to_name=payload.recipient_name,
                    attachments=[path],
                )
        except OSError as e:
            raise DispatchError(
                f"Could not prepare report for {payload.recipient_email}: {e}"
            ) from e

        if not result.success:
            return DispatchResult(sent=False, error=result.message)
        return DispatchResult(sent=True)
