"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

from html import escape
from typing import Optional

from .config import FRONTEND_URL

# Studio theme colors - Indigo/Slate color scheme
THEME = {
    "primary": "#6366f1",
    "primary_dark": "#4f46e5",
    "primary_light": "#e0e7ff",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "warning": "#f59e0b",
}


def format_hour(hour: Optional[int]) -> str:
    """Hour-of-day as a 12-hour clock label, e.g. 14 -> '2:00 PM'"""
    if hour is None:
        return "All day"
    hour = hour % 24
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display}:00 {suffix}"


def format_day(day) -> str:
    """Calendar date as '5th Jun 2024'"""
    n = day.day
    suffix = "th" if 11 <= n % 100 <= 13 else {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix} {day.strftime('%b %Y')}"


def _detail_rows(rows: list[tuple[str, Optional[str]]]) -> str:
    lines = []
    for label, value in rows:
        if value:
            lines.append(f"<strong>{escape(label)}:</strong> {escape(str(value))}")
    return f"""
    <mj-text padding="16px 0" container-background-color="{THEME['primary_light']}">
      {"<br/>".join(lines)}
    </mj-text>
    """


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    company_name: str = "Studio",
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{escape(title)}</mj-title>
        <mj-preview>{escape(preview_text)}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 40px 0 40px">
          <mj-column>
            <mj-text font-size="20px" font-weight="700" color="{THEME['primary_dark']}" padding="0 0 24px 0">
              {escape(company_name)}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="0 0 32px 0" />
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {escape(title)}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              You're receiving this because you are a member of {escape(company_name)}.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def new_member_template(name: str, email: str, password: str, company_name: str) -> str:
    """Credentials for a newly added team member"""
    content = f"""
    <mj-text>
      Hi {escape(name)},
    </mj-text>

    <mj-text>
      {escape(company_name)} has added you to their team. Use the credentials below to sign in.
    </mj-text>

    {_detail_rows([("Email", email), ("Password", password)])}

    <mj-text color="{THEME['text_muted']}" font-size="14px">
      Please change your password after your first login.
    </mj-text>
    """

    return get_base_template(
        title=f"Welcome to {company_name}!",
        preview_text="Your account has been created",
        content_sections=content,
        company_name=company_name,
        cta_url=f"{FRONTEND_URL}/login",
        cta_label="Sign In",
    )


def event_assignment_template(
    member_name: str,
    event_name: str,
    project_name: str,
    event_date: str,
    start_time: str,
    end_time: str,
    location: Optional[str],
    company_name: str,
    instructions: Optional[str] = None,
) -> str:
    content = f"""
    <mj-text>
      Hi {escape(member_name)},
    </mj-text>

    <mj-text>
      You have been assigned to <strong>{escape(event_name)}</strong> for the project
      <strong>{escape(project_name)}</strong>.
    </mj-text>

    {_detail_rows([
        ("Date", event_date),
        ("Time", f"{start_time} - {end_time}"),
        ("Location", location or "Not specified"),
        ("Instructions", instructions),
    ])}
    """

    return get_base_template(
        title="New Event Assignment",
        preview_text=f"You have been assigned to {event_name}",
        content_sections=content,
        company_name=company_name,
        cta_url=f"{FRONTEND_URL}/dashboard",
        cta_label="View Schedule",
    )


def event_reminder_template(
    member_name: str,
    event_name: str,
    project_name: str,
    event_date: str,
    start_time: str,
    end_time: str,
    location: Optional[str],
    company_name: str,
    days_until: int,
) -> str:
    day_label = "day" if days_until == 1 else "days"
    content = f"""
    <mj-text>
      Hi {escape(member_name)},
    </mj-text>

    <mj-text>
      This is a reminder that <strong>{escape(event_name)}</strong> ({escape(project_name)})
      starts in {days_until} {day_label}.
    </mj-text>

    {_detail_rows([
        ("Date", event_date),
        ("Time", f"{start_time} - {end_time}"),
        ("Location", location or "Not specified"),
    ])}
    """

    return get_base_template(
        title="Upcoming Event Reminder",
        preview_text=f"{event_name} starts in {days_until} {day_label}",
        content_sections=content,
        company_name=company_name,
        cta_url=f"{FRONTEND_URL}/dashboard",
        cta_label="View Event",
    )


def custom_reminder_template(
    member_name: str,
    event_name: str,
    project_name: str,
    event_date: str,
    start_time: str,
    end_time: str,
    location: Optional[str],
    company_name: str,
    message: Optional[str],
) -> str:
    note = ""
    if message:
        note = f"""
    <mj-text padding="16px" container-background-color="{THEME['background']}" color="{THEME['text_primary']}">
      {escape(message)}
    </mj-text>
    """

    content = f"""
    <mj-text>
      Hi {escape(member_name)},
    </mj-text>

    <mj-text>
      A reminder for <strong>{escape(event_name)}</strong> ({escape(project_name)}):
    </mj-text>

    {note}

    {_detail_rows([
        ("Date", event_date),
        ("Time", f"{start_time} - {end_time}"),
        ("Location", location or "Not specified"),
    ])}
    """

    return get_base_template(
        title="Event Reminder",
        preview_text=message or f"Reminder for {event_name}",
        content_sections=content,
        company_name=company_name,
    )


def password_reset_otp_template(otp: str, company_name: str, expiry_minutes: int) -> str:
    content = f"""
    <mj-text>
      We received a request to reset your password. Use the code below to continue.
    </mj-text>

    <mj-text align="center" font-size="32px" font-weight="700" letter-spacing="8px"
             color="{THEME['primary_dark']}" padding="24px 0">
      {escape(otp)}
    </mj-text>

    <mj-text color="{THEME['text_muted']}" font-size="14px">
      This code expires in {expiry_minutes} minutes. If you didn't request this, you can safely ignore this email.
    </mj-text>
    """

    return get_base_template(
        title="Reset Your Password",
        preview_text=f"Your password reset code is {otp}",
        content_sections=content,
        company_name=company_name,
    )
