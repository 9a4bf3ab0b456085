"""Amazon SES (v2) implementation of the EmailSender port."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from maildesk.application.ports.email_sender import EmailSender
from maildesk.domain.entities.email_record import EmailContent
from maildesk.domain.errors import DeadlineExceeded, SendFailed
from maildesk.infrastructure.aws import TIMEOUT_ERRORS, aws_client
from maildesk.infrastructure.settings import Settings, get_settings

CHARSET = "UTF-8"


def build_send_request(content: EmailContent, configuration_set: str | None = None) -> dict[str, Any]:
    """Build SendEmail parameters for a simple (non-raw) message."""
    body: dict[str, Any] = {}
    if content.text:
        body["Text"] = {"Data": content.text, "Charset": CHARSET}
    if content.html:
        body["Html"] = {"Data": content.html, "Charset": CHARSET}

    params: dict[str, Any] = {
        "FromEmailAddress": content.from_[0],
        "Destination": {
            "ToAddresses": list(content.to),
            "CcAddresses": list(content.cc),
            "BccAddresses": list(content.bcc),
        },
        "ReplyToAddresses": list(content.reply_to),
        "Content": {
            "Simple": {
                "Subject": {"Data": content.subject, "Charset": CHARSET},
                "Body": body,
            }
        },
    }
    if configuration_set:
        params["ConfigurationSetName"] = configuration_set
    return params


class SesEmailSender(EmailSender):
    """Send through SES; the SES MessageId becomes the sent record's id."""

    def __init__(self, client: Any, configuration_set: str | None = None) -> None:
        self.client = client
        self.configuration_set = configuration_set

    def send(self, content: EmailContent) -> str:
        if not content.from_ or not content.from_[0]:
            raise SendFailed("email has no sender address", details={"field": "from"})

        try:
            resp = self.client.send_email(**build_send_request(content, self.configuration_set))
        except TIMEOUT_ERRORS as e:
            logger.error(f"SES send timed out: {e}")
            raise DeadlineExceeded("send_email timed out") from e
        except (ClientError, BotoCoreError) as e:
            logger.error(f"SES rejected email from {content.from_[0]}: {e}")
            raise SendFailed(f"send_email failed: {e}") from e

        message_id = resp.get("MessageId", "")
        logger.info(f"SES accepted email from {content.from_[0]} as {message_id}")
        return message_id


def ses_sender_from_settings(settings: Settings | None = None) -> SesEmailSender:
    settings = settings or get_settings()
    return SesEmailSender(aws_client("sesv2", settings), settings.ses_configuration_set)
