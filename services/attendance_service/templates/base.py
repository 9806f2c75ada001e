"""
Shared email layout for attendance reports.

Reports use `wrap_html()` for a consistent header, body and footer, and the
small helpers below for summary boxes and tables.

Usage:
    from services.attendance_service.templates.base import wrap_html, detail_box

    html = wrap_html(
        title="Day End Attendance Report",
        subtitle="Government Polytechnic - 2025-03-13",
        body_html=detail_box({...}) + table(...),
    )
"""

from html import escape
from typing import Sequence

# ─── Color preset ────────────────────────────────────────────────────
GRADIENT_BLUE = "linear-gradient(135deg, #1e3a8a 0%, #1d4ed8 100%)"


def wrap_html(
    title: str,
    body_html: str,
    subtitle: str = "",
    header_gradient: str = GRADIENT_BLUE,
    preheader: str = "",
) -> str:
    """Wrap inner content in the shared report layout.

    Args:
        title: Bold heading shown in the coloured header banner.
        body_html: The main content (already-formatted HTML).
        subtitle: Smaller text below the title in the header.
        header_gradient: CSS gradient for the header background.
        preheader: Hidden preview text shown in inbox list view.
    """
    subtitle_html = (
        f'<p style="margin: 8px 0 0 0; opacity: 0.9; font-size: 15px;">{escape(subtitle)}</p>'
        if subtitle
        else ""
    )
    preheader_html = (
        f'<span style="display:none;font-size:1px;line-height:1px;max-height:0;overflow:hidden;">{escape(preheader)}</span>'
        if preheader
        else ""
    )

    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{escape(title)}</title>
    <style>
        body {{
            margin: 0;
            padding: 0;
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;
            color: #334155;
            background-color: #f1f5f9;
        }}
        .report-wrapper {{
            width: 100%;
            padding: 32px 12px;
        }}
        .report-container {{
            max-width: 900px;
            margin: 0 auto;
            background-color: #ffffff;
            border-radius: 12px;
            overflow: hidden;
        }}
        .report-header {{
            background: {header_gradient};
            padding: 28px 32px 22px;
        }}
        .report-header h1 {{
            margin: 0;
            font-size: 22px;
            color: #ffffff;
        }}
        .report-body {{
            padding: 24px 32px;
        }}
        .report-body h3 {{
            margin: 24px 0 10px;
            font-size: 16px;
            color: #1e293b;
        }}
        .detail-box {{
            background: #f8fafc;
            border-left: 4px solid #1d4ed8;
            border-radius: 0 8px 8px 0;
            padding: 16px 20px;
            margin: 16px 0;
        }}
        .detail-row {{
            margin: 6px 0;
            font-size: 14px;
        }}
        .detail-label {{
            color: #64748b;
        }}
        .detail-value {{
            font-weight: 600;
            color: #1e293b;
        }}
        table.report-table {{
            width: 100%;
            border-collapse: collapse;
            font-size: 12px;
        }}
        table.report-table th, table.report-table td {{
            padding: 4px 6px;
            border: 1px solid #dddddd;
        }}
        table.report-table th {{
            background: #f1f5f9;
            text-align: left;
        }}
        table.report-table td.num {{
            text-align: right;
        }}
        .report-footer {{
            background: #f8fafc;
            padding: 16px 32px;
            text-align: center;
            font-size: 12px;
            color: #94a3b8;
            border-top: 1px solid #e2e8f0;
        }}
    </style>
</head>
<body>
    {preheader_html}
    <div class="report-wrapper">
        <div class="report-container">
            <div class="report-header">
                <h1>{escape(title)}</h1>
                {subtitle_html}
            </div>
            <div class="report-body">
                {body_html}
            </div>
            <div class="report-footer">
                <p>This report was generated automatically at day end.</p>
            </div>
        </div>
    </div>
</body>
</html>"""


# ─── Helper functions ─────────────────────────────────────────────────


def detail_box(items: dict[str, object], accent_color: str = "#1d4ed8") -> str:
    """Render a key-value summary box; None values are skipped."""
    rows = "\n".join(
        f'<div class="detail-row"><span class="detail-label">{escape(label)}:</span> '
        f'<span class="detail-value">{escape(str(value))}</span></div>'
        for label, value in items.items()
        if value is not None
    )
    return (
        f'<div class="detail-box" style="border-left-color: {accent_color};">'
        f"{rows}</div>"
    )


def table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> str:
    """Render a bordered table; int and float cells are right-aligned."""
    head = "".join(f"<th>{escape(h)}</th>" for h in headers)
    body = "\n".join(
        "<tr>"
        + "".join(
            f'<td class="num">{cell}</td>'
            if isinstance(cell, (int, float))
            else f"<td>{escape(str(cell))}</td>"
            for cell in row
        )
        + "</tr>"
        for row in rows
    )
    return f'<table class="report-table"><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>'
