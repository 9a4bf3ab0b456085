"""
API routes for the Maildesk service.

Error kinds from the core are mapped to HTTP status codes here and nowhere
else.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger
from pydantic import BaseModel, Field

from maildesk.domain import (
    CreateInput,
    DeadlineExceeded,
    EmailContent,
    EmailIsNotDraft,
    EmailRecord,
    InvalidInput,
    MaildeskError,
    RecordNotFound,
    SaveInput,
    SaveResult,
    SendFailed,
    StorageError,
    format_time,
)
from maildesk.infrastructure import get_settings, get_use_cases
from maildesk.infrastructure.container import UseCases

router = APIRouter()

STATUS_CODES: dict[type[MaildeskError], int] = {
    InvalidInput: 400,
    RecordNotFound: 404,
    EmailIsNotDraft: 409,
    SendFailed: 502,
    DeadlineExceeded: 504,
    StorageError: 500,
}


# ============================================================================
# Request/Response Models
# ============================================================================


class EmailBody(BaseModel):
    """Envelope and body of a draft."""

    subject: str = ""
    from_: list[str] = Field(default_factory=list, alias="from")
    to: list[str] = Field(default_factory=list)
    cc: list[str] = Field(default_factory=list)
    bcc: list[str] = Field(default_factory=list)
    reply_to: list[str] = Field(default_factory=list, alias="replyTo")
    text: str = ""
    html: str = ""

    model_config = {"populate_by_name": True}

    def to_content(self) -> EmailContent:
        return EmailContent(
            subject=self.subject,
            from_=self.from_,
            to=self.to,
            cc=self.cc,
            bcc=self.bcc,
            reply_to=self.reply_to,
            text=self.text,
            html=self.html,
        )


class SaveRequest(EmailBody):
    """Request body for creating or saving a draft."""

    generate_text: str = Field("off", alias="generateText", description="off, on or auto")
    send: bool = Field(False, description="Send the draft after saving it")


class EmailResponse(BaseModel):
    """A stored email."""

    message_id: str = Field(..., alias="messageID")
    type: str
    time_updated: str = Field(..., alias="timeUpdated")
    subject: str
    from_: list[str] = Field(..., alias="from")
    to: list[str]
    cc: list[str]
    bcc: list[str]
    reply_to: list[str] = Field(..., alias="replyTo")
    text: str
    html: str

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: SaveResult) -> "EmailResponse":
        return cls(
            message_id=result.message_id,
            type=result.kind.value,
            time_updated=result.time_updated,
            subject=result.subject,
            from_=result.from_,
            to=result.to,
            cc=result.cc,
            bcc=result.bcc,
            reply_to=result.reply_to,
            text=result.text,
            html=result.html,
        )

    @classmethod
    def from_record(cls, record: EmailRecord) -> "EmailResponse":
        return cls.from_result(SaveResult.from_record(record))


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str


# ============================================================================
# Error mapping
# ============================================================================


def to_http_error(error: MaildeskError) -> HTTPException:
    status_code = 500
    for kind, code in STATUS_CODES.items():
        if isinstance(error, kind):
            status_code = code
            break
    return HTTPException(status_code=status_code, detail=error.to_dict())


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=format_time(datetime.now(timezone.utc)),
        version=settings.app_version,
    )


@router.post("/emails", response_model=EmailResponse, response_model_by_alias=True, status_code=201, tags=["emails"])
def create_email(request: SaveRequest, use_cases: UseCases = Depends(get_use_cases)) -> EmailResponse:
    """Create a new draft, optionally sending it right away."""
    try:
        result = use_cases.save.create(
            CreateInput(
                content=request.to_content(),
                generate_text=request.generate_text,
                send=request.send,
            )
        )
    except MaildeskError as e:
        logger.warning(f"Create failed: {e.code} {e.message}")
        raise to_http_error(e)
    return EmailResponse.from_result(result)


@router.put("/emails/{message_id}", response_model=EmailResponse, response_model_by_alias=True, tags=["emails"])
def save_email(
    message_id: str,
    request: SaveRequest,
    use_cases: UseCases = Depends(get_use_cases),
) -> EmailResponse:
    """Save a draft, optionally sending it."""
    try:
        result = use_cases.save.save(
            SaveInput(
                message_id=message_id,
                content=request.to_content(),
                generate_text=request.generate_text,
                send=request.send,
            )
        )
    except MaildeskError as e:
        logger.warning(f"Save of {message_id} failed: {e.code} {e.message}")
        raise to_http_error(e)
    return EmailResponse.from_result(result)


@router.get("/emails/{message_id}", response_model=EmailResponse, response_model_by_alias=True, tags=["emails"])
def get_email(message_id: str, use_cases: UseCases = Depends(get_use_cases)) -> EmailResponse:
    """Fetch a stored email."""
    try:
        record = use_cases.get.get(message_id)
    except MaildeskError as e:
        raise to_http_error(e)
    return EmailResponse.from_record(record)


@router.delete("/emails/{message_id}", status_code=204, tags=["emails"])
def discard_email(message_id: str, use_cases: UseCases = Depends(get_use_cases)) -> Response:
    """Discard a draft that was never sent."""
    try:
        use_cases.discard.discard(message_id)
    except MaildeskError as e:
        logger.warning(f"Discard of {message_id} failed: {e.code} {e.message}")
        raise to_http_error(e)
    return Response(status_code=204)
