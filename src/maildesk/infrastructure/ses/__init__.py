"""Outbound email through Amazon SES."""

from maildesk.infrastructure.ses.sender import SesEmailSender, build_send_request, ses_sender_from_settings

__all__ = [
    "SesEmailSender",
    "build_send_request",
    "ses_sender_from_settings",
]
