# whatsapp.py - simulated WhatsApp Business messaging: send, webhook verification, inbound auto-replies
import asyncio
import enum
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import ValidationError as PydanticValidationError
from config import Settings
from errors import AuthError, MalformedWebhookPayload, ValidationError
from handlers import is_blank
import schemas

logger = logging.getLogger("akademyx-whatsapp")

WEBHOOK_OBJECT = "whatsapp_business_account"

PRICING_REPLY = (
    "Our Akademyx Masterclass Programme costs ₦3,000 for the complete 21-day course "
    "with 3 certifications! \U0001F393"
)
COHORT_REPLY = (
    "Great! The next cohort starts soon. Would you like me to send you the enrollment details? \U0001F4DA"
)
CERTIFICATION_REPLY = (
    "You'll receive 3 prestigious certifications upon completion: Community Impact Advocacy, "
    "Virtual Polyworking & Multipreneurship, and Prompt Engineering! \U0001F3C6"
)

# checked in order, first match wins
AUTO_REPLIES = (
    (("price", "cost"), PRICING_REPLY),
    (("start", "begin"), COHORT_REPLY),
    (("certification", "certificate"), CERTIFICATION_REPLY),
)

TEMPLATES = {
    "welcome": {
        "name": "akademyx_welcome",
        "components": [
            {"type": "header", "parameters": [{"type": "text", "text": "Akademyx Masterclass"}]},
            {"type": "body", "parameters": [{"type": "text", "text": "Welcome to Akademyx!"}]},
        ],
    },
    "enrollmentConfirmation": {
        "name": "akademyx_enrollment_confirmation",
        "components": [
            {"type": "body", "parameters": [{"type": "text", "text": "Your enrollment is confirmed!"}]},
            {"type": "button", "parameters": [{"type": "text", "text": "Join Now"}]},
        ],
    },
    "courseReminder": {
        "name": "akademyx_course_reminder",
        "components": [
            {"type": "body", "parameters": [{"type": "text", "text": "Course starts tomorrow!"}]},
            {"type": "footer", "parameters": [{"type": "text", "text": "Akademyx Team"}]},
        ],
    },
    "completionCertificate": {
        "name": "akademyx_completion_certificate",
        "components": [
            {"type": "header", "parameters": [{"type": "text", "text": "\U0001F389 Congratulations!"}]},
            {"type": "body", "parameters": [{"type": "text", "text": "You have completed the course!"}]},
            {"type": "footer", "parameters": [{"type": "text", "text": "Your certificate is ready!"}]},
        ],
    },
}


class MessageStatus(str, enum.Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class MessageSender(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class OutboundMessage:
    message_id: str
    recipient: str
    text: str
    status: MessageStatus
    timestamp: str
    template_name: Optional[str] = None
    sender_role: MessageSender = MessageSender.ADMIN


@dataclass
class InboundMessage:
    sender: str
    text: Optional[str]
    message_id: Optional[str] = None
    sender_role: MessageSender = MessageSender.USER


def select_auto_reply(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    lowered = text.lower()
    for keywords, reply in AUTO_REPLIES:
        if any(keyword in lowered for keyword in keywords):
            return reply
    return None


def parse_webhook(body) -> List[InboundMessage]:
    """Extract the first message of every "messages" change in a webhook body.

    Payloads for other provider objects yield nothing. A payload for a
    business account that does not follow entry/changes/messages raises
    MalformedWebhookPayload instead of being skipped.
    """
    if not isinstance(body, dict):
        raise MalformedWebhookPayload("webhook body must be a JSON object")
    if body.get("object") != WEBHOOK_OBJECT:
        return []

    try:
        payload = schemas.WebhookPayload.model_validate(body)
        inbound = []
        for entry in payload.entry:
            for change in entry.changes:
                if change.field != "messages":
                    continue
                value = schemas.WebhookMessagesValue.model_validate(change.value)
                if not value.messages:
                    continue
                message = value.messages[0]
                text = message.text.body if message.text else None
                inbound.append(InboundMessage(sender=message.sender, text=text, message_id=message.id))
    except PydanticValidationError as e:
        raise MalformedWebhookPayload("webhook payload does not match the messages schema", e.errors()) from e
    return inbound


class WhatsAppClient:
    """Stand-in for the WhatsApp Business API: nothing leaves the process."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send_message(self, phone_number, message, template_name=None, template_params=None) -> OutboundMessage:
        if is_blank(phone_number) or is_blank(message):
            raise ValidationError("Phone number and message are required")

        registered_name = None
        if not is_blank(template_name) and template_params is not None:
            registered_name = TEMPLATES.get(template_name, {}).get("name", template_name)
            logger.info(
                "[SIMULATED] POST %s/%s/messages template=%s params=%s to=%s",
                self.settings.whatsapp_api_url,
                self.settings.whatsapp_phone_number_id,
                registered_name,
                template_params,
                phone_number,
            )
        else:
            logger.info(
                "[SIMULATED] POST %s/%s/messages to=%s text=%r",
                self.settings.whatsapp_api_url,
                self.settings.whatsapp_phone_number_id,
                phone_number,
                message,
            )

        await asyncio.sleep(self.settings.whatsapp_send_delay)

        return OutboundMessage(
            message_id=f"msg_{int(time.time() * 1000)}",
            recipient=phone_number,
            text=message,
            status=MessageStatus.SENT,
            timestamp=datetime.now(timezone.utc).isoformat(),
            template_name=registered_name,
        )

    def verify_subscription(self, mode, token, challenge) -> str:
        expected = self.settings.whatsapp_webhook_token
        if mode != "subscribe" or not expected or token is None:
            raise AuthError("webhook verification refused")
        if not secrets.compare_digest(token.encode(), expected.encode()):
            raise AuthError("webhook verification refused")
        logger.info("[WEBHOOK] subscription verified")
        return challenge or ""

    async def handle_webhook(self, body) -> List[OutboundMessage]:
        """Parse an inbound webhook and send the matching auto-replies."""
        replies = []
        for inbound in parse_webhook(body):
            logger.info("[WEBHOOK] message %s from %s: %r", inbound.message_id, inbound.sender, inbound.text)
            reply = select_auto_reply(inbound.text)
            if reply is None:
                continue
            replies.append(await self.send_message(inbound.sender, reply))
        return replies
