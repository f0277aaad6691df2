"""Exceptions raised by the provider API wrappers."""


class ProviderError(Exception):
    """Base exception for Facebook/Telegram API failures."""

    pass


class MissingCredentialsError(ProviderError):
    """Raised when a credential needed for an outbound call is not configured."""

    def __init__(self, setting_name: str):
        super().__init__(f"{setting_name} is not configured")
        self.setting_name = setting_name


class TelegramAPIError(ProviderError):
    """Raised when the Bot API answers with ok=false."""

    def __init__(self, method: str, error_code: int | None, description: str):
        super().__init__(f"Telegram {method} failed ({error_code}): {description}")
        self.method = method
        self.error_code = error_code
        self.description = description
