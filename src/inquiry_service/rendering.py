# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Subject and body rendering for inquiry notifications.

Both bodies carry the same content. The plain-text body keeps the
requirement's line breaks as they were typed; the HTML body escapes every
user-supplied value and turns each line break into ``<br>``.
"""

from __future__ import annotations

import html
import re
from datetime import datetime, timezone
from string import Template
from zoneinfo import ZoneInfo

from .config_loader import DEFAULT_FROM_NAME, DEFAULT_TIMEZONE
from .models import Inquiry

NOT_AVAILABLE = "N/A"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")

_TEXT_TEMPLATE = Template("""\
New Contact Form Submission

Name: $name
Company: $company
Email: $email <mailto:$email>
Phone: $phone <tel:$tel>

Project Requirement:
$requirement

Submitted at: $submitted_at
This is an automated notification from $from_name.
""")

_HTML_TEMPLATE = Template("""\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    h2 { color: #2563eb; border-bottom: 2px solid #2563eb; padding-bottom: 10px; }
    .field { margin: 15px 0; }
    .field strong { display: inline-block; width: 120px; color: #555; }
    .requirement { background-color: #f3f4f6; padding: 15px; border-radius: 5px; margin: 15px 0; }
    .footer { margin-top: 30px; padding-top: 15px; border-top: 1px solid #e5e7eb; font-size: 12px; color: #6b7280; }
  </style>
</head>
<body>
  <div class="container">
    <h2>New Contact Form Submission</h2>
    <div class="field"><strong>Name:</strong> $name</div>
    <div class="field"><strong>Company:</strong> $company</div>
    <div class="field"><strong>Email:</strong> <a href="mailto:$email">$email</a></div>
    <div class="field"><strong>Phone:</strong> <a href="tel:$tel">$phone</a></div>
    <div class="field"><strong>Project Requirement:</strong></div>
    <div class="requirement">$requirement</div>
    <div class="footer">
      <p>Submitted at: $submitted_at</p>
      <p>This is an automated notification from $from_name.</p>
    </div>
  </div>
</body>
</html>
""")


def build_subject(inquiry: Inquiry) -> str:
    return f"New Inquiry from {inquiry.name} - {inquiry.company}"


def format_submitted_at(created_at: datetime | None, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Render a timestamp in a fixed regional zone, e.g. ``19/10/2026, 3:05:09 pm``.

    Naive datetimes are taken as UTC. ``None`` renders as ``N/A``.
    """
    if created_at is None:
        return NOT_AVAILABLE
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    local = created_at.astimezone(ZoneInfo(tz_name))
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return f"{local:%d/%m/%Y}, {hour}:{local:%M:%S} {meridiem}"


def tel_target(phone: str) -> str:
    """Phone number as used in a ``tel:`` link: whitespace removed."""
    return "".join(phone.split())


def html_with_breaks(text: str) -> str:
    """Escape ``text`` for HTML and replace each line break with ``<br>``."""
    return _LINE_BREAK.sub("<br>", html.escape(text))


def render_text(inquiry: Inquiry, *, submitted_at: str, from_name: str = DEFAULT_FROM_NAME) -> str:
    return _TEXT_TEMPLATE.substitute(
        name=inquiry.name,
        company=inquiry.company,
        email=inquiry.email,
        phone=inquiry.phone,
        tel=tel_target(inquiry.phone),
        requirement=inquiry.requirement,
        submitted_at=submitted_at,
        from_name=from_name,
    )


def render_html(inquiry: Inquiry, *, submitted_at: str, from_name: str = DEFAULT_FROM_NAME) -> str:
    esc = html.escape
    return _HTML_TEMPLATE.substitute(
        name=esc(inquiry.name),
        company=esc(inquiry.company),
        email=esc(inquiry.email),
        phone=esc(inquiry.phone),
        tel=esc(tel_target(inquiry.phone)),
        requirement=html_with_breaks(inquiry.requirement),
        submitted_at=esc(submitted_at),
        from_name=esc(from_name),
    )


__all__ = [
    "NOT_AVAILABLE",
    "build_subject",
    "format_submitted_at",
    "html_with_breaks",
    "render_html",
    "render_text",
    "tel_target",
]
