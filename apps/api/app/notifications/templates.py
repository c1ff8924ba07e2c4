from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from html import escape

from app.notifications.base import Contact, RegistrationNotice

_WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_event_date(value: datetime | None) -> str:
    if value is None:
        return "Date TBD"
    return _utc(value).strftime("%A, %B %d, %Y")


def format_event_time(start: datetime | None, end: datetime | None) -> str:
    if start is None:
        return "Time TBD"
    text = _utc(start).strftime("%I:%M %p").lstrip("0")
    if end is not None:
        text += " - " + _utc(end).strftime("%I:%M %p").lstrip("0")
    return text


def _hub_lines(notice: RegistrationNotice) -> str:
    lines = [f"<p><strong>Hosted by:</strong> {escape(notice.hub_name)}</p>"]
    if notice.hub_address:
        lines.append(f"<p><strong>Address:</strong><br/>{escape(notice.hub_address)}</p>")
    if notice.hub_city and notice.hub_state:
        lines.append(f"<p>{escape(notice.hub_city)}, {escape(notice.hub_state)}</p>")
    if notice.hub_country:
        lines.append(f"<p>{escape(notice.hub_country)}</p>")
    return "\n".join(lines)


def registration_confirmation(notice: RegistrationNotice) -> EmailMessage:
    title = escape(notice.event_title)
    body = f"""
      <h2>You're Registered for {title}!</h2>
      <p>Hi {escape(notice.contact.first_name)},</p>
      <p>Thank you for registering for the upcoming BuildClub event. We're excited to have you join us!</p>
      <div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <h3 style="margin-top: 0;">{title}</h3>
        <p>{escape(notice.event_description or "")}</p>
        <p><strong>Date:</strong> {format_event_date(notice.start_datetime)}</p>
        <p><strong>Time:</strong> {format_event_time(notice.start_datetime, notice.end_datetime)}</p>
        {_hub_lines(notice)}
      </div>
      <p>If you need to cancel your registration, visit your dashboard on the BuildClub website.</p>
      <p>The BuildClub Team</p>
    """
    return EmailMessage(
        to=notice.contact.email,
        subject=f"Registered: {notice.event_title}",
        html=_WRAPPER.format(body=body),
    )


def cancellation(notice: RegistrationNotice) -> EmailMessage:
    title = escape(notice.event_title)
    body = f"""
      <h2>Registration Cancelled: {title}</h2>
      <p>Hi {escape(notice.contact.first_name)},</p>
      <p>We've processed your request to cancel your registration for "{title}".</p>
      <p>We hope to see you at future BuildClub events.</p>
      <p>The BuildClub Team</p>
    """
    return EmailMessage(
        to=notice.contact.email,
        subject=f"Registration Cancelled: {notice.event_title}",
        html=_WRAPPER.format(body=body),
    )


def welcome(contact: Contact) -> EmailMessage:
    body = f"""
      <h2>Welcome to BuildClub!</h2>
      <p>Hi {escape(contact.first_name)},</p>
      <p>We're excited to have you join our community of AI builders. We'll keep you updated on upcoming events and opportunities.</p>
      <ul>
        <li><strong>Name:</strong> {escape(contact.first_name)} {escape(contact.last_name)}</li>
        <li><strong>Email:</strong> {escape(contact.email)}</li>
      </ul>
      <p>The BuildClub Team</p>
    """
    return EmailMessage(to=contact.email, subject="Welcome to BuildClub!", html=_WRAPPER.format(body=body))


def operator_notification(
    contact: Contact, operator_email: str, notice: RegistrationNotice | None = None
) -> EmailMessage:
    if notice is not None:
        return _operator_registration(notice, operator_email)
    body = f"""
      <h2>New BuildClub Member</h2>
      <p>A new user has joined BuildClub:</p>
      <ul>
        <li><strong>Name:</strong> {escape(contact.first_name)} {escape(contact.last_name)}</li>
        <li><strong>Email:</strong> {escape(contact.email)}</li>
      </ul>
    """
    return EmailMessage(
        to=operator_email,
        subject="New BuildClub Member Joined",
        html=_WRAPPER.format(body=body),
    )


def _operator_registration(notice: RegistrationNotice, operator_email: str) -> EmailMessage:
    contact = notice.contact
    body = f"""
      <h2>New Event Registration</h2>
      <p>{escape(contact.first_name)} {escape(contact.last_name)} registered for {escape(notice.event_title)}.</p>
      <ul>
        <li><strong>Email:</strong> {escape(contact.email)}</li>
        <li><strong>Event:</strong> {escape(notice.event_title)}</li>
        <li><strong>Date:</strong> {format_event_date(notice.start_datetime)}</li>
        <li><strong>Hub:</strong> {escape(notice.hub_name)}</li>
        <li><strong>Interests:</strong> {escape(", ".join(contact.interest_areas))}</li>
      </ul>
    """
    return EmailMessage(
        to=operator_email,
        subject=f"New Registration: {notice.event_title} ({notice.hub_name})",
        html=_WRAPPER.format(body=body),
    )
