"""Assistant fulfillment webhook (API.AI / Dialogflow v1 request and response shapes)."""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.concurrency import run_in_threadpool

from yumcontacts.application import AssistantDispatcher, AssistantMessage, AssistantRequest
from yumcontacts.domain import PayloadError

logger = logging.getLogger(__name__)

router = APIRouter()


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AssistantMetadata(_Payload):
    intent_id: str = Field(default="", alias="intentId")
    webhook_used: str = Field(default="", alias="webhookUsed")
    webhook_for_slot_filling_used: str = Field(default="", alias="webhookForSlotFillingUsed")
    intent_name: str = Field(default="", alias="intentName")


class AssistantResult(_Payload):
    parameters: dict[str, Any] = Field(default_factory=dict)
    contexts: list[Any] = Field(default_factory=list)
    metadata: AssistantMetadata = Field(default_factory=AssistantMetadata)
    score: float = 0.0


class AssistantStatus(_Payload):
    code: int = 0
    error_type: str = Field(default="", alias="errorType")


class AssistantWebhookRequest(_Payload):
    id: str = ""
    timestamp: datetime | None = None
    result: AssistantResult = Field(default_factory=AssistantResult)
    status: AssistantStatus = Field(default_factory=AssistantStatus)
    session_id: str = Field(default="", alias="sessionId")
    original_request: Any = Field(default=None, alias="originalRequest")


class AssistantWebhookResponse(_Payload):
    speech: str
    display_text: str = Field(alias="displayText")
    source: str


def _param_text(value: Any) -> str:
    """Flatten a parameter value to text. Lists (e.g. multi-word addresses) are joined by spaces."""
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(_param_text(v) for v in value if v is not None).strip()
    if isinstance(value, dict):
        return " ".join(_param_text(v) for v in value.values()).strip()
    return str(value)


def to_assistant_request(payload: AssistantWebhookRequest) -> AssistantRequest:
    return AssistantRequest(
        intent_name=payload.result.metadata.intent_name,
        parameters={k: _param_text(v) for k, v in payload.result.parameters.items()},
        session_id=payload.session_id,
        request_id=payload.id,
        timestamp=payload.timestamp,
    )


def to_webhook_response(message: AssistantMessage) -> AssistantWebhookResponse:
    return AssistantWebhookResponse(
        speech=message.speech,
        display_text=message.display_text,
        source=message.source,
    )


def decode_payload(body: bytes) -> AssistantWebhookRequest:
    try:
        return AssistantWebhookRequest.model_validate_json(body)
    except ValidationError as e:
        raise PayloadError(f"Decode of request failed: {e}") from e


@router.post("/contactsWebhook")
async def contacts_webhook(request: Request):
    """Handle an assistant fulfillment request: decode, dispatch on intent, answer with speech."""
    payload = decode_payload(await request.body())
    assistant_request = to_assistant_request(payload)
    logger.info(
        "Assistant webhook received: intent=%s session=%s",
        assistant_request.intent_name,
        assistant_request.session_id,
    )
    dispatcher: AssistantDispatcher = request.app.state.dispatcher
    message = await run_in_threadpool(dispatcher.dispatch, assistant_request)
    return JSONResponse(content=to_webhook_response(message).model_dump(by_alias=True))
