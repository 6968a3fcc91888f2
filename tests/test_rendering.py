import html
import re
from datetime import datetime, timezone

import pytest

from inquiry_service.models import Inquiry
from inquiry_service.rendering import (
    NOT_AVAILABLE,
    build_subject,
    format_submitted_at,
    html_with_breaks,
    render_html,
    render_text,
    tel_target,
)


def make_inquiry(**overrides):
    data = {
        "id": "inq-1",
        "name": "Asha Rao",
        "company": "Acme Foods",
        "email": "asha@acme.test",
        "phone": "+91 98765 43210",
        "requirement": "Line one\nLine two",
        "created_at": datetime(2026, 3, 1, 9, 30, 15, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return Inquiry(**data)


def visible_text(fragment: str) -> str:
    """What a mail client shows: <br> as newline, tags dropped, entities decoded."""
    return html.unescape(re.sub(r"<[^>]+>", "", fragment.replace("<br>", "\n")))


def test_subject():
    assert build_subject(make_inquiry()) == "New Inquiry from Asha Rao - Acme Foods"


@pytest.mark.parametrize(
    "moment, expected",
    [
        (datetime(2026, 3, 1, 9, 30, 15, tzinfo=timezone.utc), "01/03/2026, 3:00:15 pm"),
        (datetime(2026, 3, 1, 18, 45, 0, tzinfo=timezone.utc), "02/03/2026, 12:15:00 am"),
        (datetime(2026, 3, 1, 6, 30, 0, tzinfo=timezone.utc), "01/03/2026, 12:00:00 pm"),
        # naive values are UTC
        (datetime(2026, 3, 1, 0, 0, 5), "01/03/2026, 5:30:05 am"),
    ],
)
def test_format_submitted_at_uses_india_time(moment, expected):
    assert format_submitted_at(moment) == expected


def test_format_submitted_at_other_zone():
    moment = datetime(2026, 7, 1, 12, 0, 0, tzinfo=timezone.utc)
    assert format_submitted_at(moment, "Europe/Rome") == "01/07/2026, 2:00:00 pm"


def test_missing_timestamp_renders_not_available():
    assert format_submitted_at(None) == NOT_AVAILABLE
    body = render_text(make_inquiry(created_at=None), submitted_at=format_submitted_at(None))
    assert "Submitted at: N/A" in body


def test_tel_target_strips_whitespace():
    assert tel_target("+91 98765\t43210") == "+919876543210"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("a\nb", "a<br>b"),
        ("a\r\nb", "a<br>b"),
        ("a\rb", "a<br>b"),
        ("a\n\nb", "a<br><br>b"),
        ("<b>&</b>", "&lt;b&gt;&amp;&lt;/b&gt;"),
    ],
)
def test_html_with_breaks(text, expected):
    assert html_with_breaks(text) == expected


def test_text_body_keeps_line_breaks():
    inquiry = make_inquiry(requirement="Rooftop solar\n40 kW\n\nSite visit")
    body = render_text(inquiry, submitted_at="01/03/2026, 3:00:15 pm")

    assert "Project Requirement:\nRooftop solar\n40 kW\n\nSite visit\n" in body
    assert "Name: Asha Rao" in body
    assert "Company: Acme Foods" in body
    assert "Email: asha@acme.test <mailto:asha@acme.test>" in body
    assert "Phone: +91 98765 43210 <tel:+919876543210>" in body
    assert "Submitted at: 01/03/2026, 3:00:15 pm" in body
    assert "automated notification from Urja Contact Form" in body


def test_html_body_links_and_breaks():
    body = render_html(make_inquiry(), submitted_at="x", from_name="Acme Web")

    assert '<a href="mailto:asha@acme.test">asha@acme.test</a>' in body
    assert '<a href="tel:+919876543210">+91 98765 43210</a>' in body
    assert '<div class="requirement">Line one<br>Line two</div>' in body
    assert "automated notification from Acme Web." in body


def test_html_body_escapes_markup_in_every_field():
    inquiry = make_inquiry(
        name="<script>alert(1)</script>",
        company="Tom & Jerry",
        requirement='Needs <b>bold</b> "quotes"\nand a second line',
    )
    body = render_html(inquiry, submitted_at="x")

    assert "<script>" not in body
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in body
    assert "Tom &amp; Jerry" in body
    assert "<b>bold</b>" not in body


def test_html_requirement_shows_the_original_text():
    requirement = 'Needs <b>bold</b> & "quotes"\r\nsecond line\n\nthird'
    body = render_html(make_inquiry(requirement=requirement), submitted_at="x")

    fragment = re.search(r'<div class="requirement">(.*?)</div>', body, re.S).group(1)
    assert visible_text(fragment) == requirement.replace("\r\n", "\n")
