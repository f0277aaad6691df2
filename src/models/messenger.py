"""Incoming Facebook Messenger and Telegram webhook models."""

from pydantic import BaseModel, ConfigDict, Field


class _WebhookModel(BaseModel):
    """Provider payloads carry many fields we do not use."""

    model_config = ConfigDict(extra="ignore")


# =============================================================================
# Facebook Messenger
# =============================================================================


class MessengerAttachmentPayload(_WebhookModel):
    url: str | None = None


class MessengerAttachment(_WebhookModel):
    """Attachment on an incoming Messenger message."""

    type: str
    payload: MessengerAttachmentPayload | None = None


class MessengerMessage(_WebhookModel):
    """Incoming Facebook Messenger message."""

    mid: str | None = None
    text: str | None = None
    is_echo: bool = False
    attachments: list[MessengerAttachment] = Field(default_factory=list)

    @property
    def image_urls(self) -> list[str]:
        return [
            attachment.payload.url
            for attachment in self.attachments
            if attachment.type == "image"
            and attachment.payload is not None
            and attachment.payload.url
        ]


class MessengerParticipant(_WebhookModel):
    id: str | None = None


class MessengerEvent(_WebhookModel):
    """One element of entry.messaging."""

    sender: MessengerParticipant = Field(default_factory=MessengerParticipant)
    recipient: MessengerParticipant = Field(default_factory=MessengerParticipant)
    timestamp: int | None = None
    message: MessengerMessage | None = None


class MessengerEntry(_WebhookModel):
    """Facebook webhook entry."""

    id: str | None = None
    time: int | None = None
    messaging: list[MessengerEvent] = Field(default_factory=list)


class MessengerWebhookPayload(_WebhookModel):
    """Facebook webhook payload."""

    object: str
    entry: list[MessengerEntry] = Field(default_factory=list)


# =============================================================================
# Telegram
# =============================================================================


class TelegramChat(_WebhookModel):
    id: int


class TelegramMessage(_WebhookModel):
    message_id: int
    chat: TelegramChat | None = None
    caption: str | None = None


class TelegramCallbackQuery(_WebhookModel):
    """Inline button press."""

    id: str
    data: str | None = None
    message: TelegramMessage | None = None


class TelegramUpdate(_WebhookModel):
    """Telegram Bot API update delivered to the webhook."""

    update_id: int | None = None
    callback_query: TelegramCallbackQuery | None = None
