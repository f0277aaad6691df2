"""Application-wide constants.

This module centralizes all magic numbers, fixed texts and configuration
defaults to ensure a single source of truth and easier maintenance.
"""

# =============================================================================
# HTTP Timeout Configuration
# =============================================================================

# Timeout for Facebook Graph API calls (seconds)
FACEBOOK_API_TIMEOUT_SECONDS = 10.0

# Timeout for Telegram Bot API calls (seconds)
TELEGRAM_API_TIMEOUT_SECONDS = 10.0

# =============================================================================
# Rate Limiting
# =============================================================================

# Minimum gap between two accepted photos from the same sender
ORDER_COOLDOWN_SECONDS = 30

# =============================================================================
# State Retention
# =============================================================================

# Orders older than this are evicted from memory (7 days)
ORDER_RETENTION_SECONDS = 7 * 24 * 60 * 60

# How often the background sweep evicts expired state (seconds)
STATE_SWEEP_INTERVAL_SECONDS = 300

# How long shutdown waits for in-flight relay and decision work (seconds)
GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS = 30.0

# =============================================================================
# Identity
# =============================================================================

# Shown whenever the sender's profile cannot be resolved
DEFAULT_DISPLAY_NAME = "Facebook user"

# Number of trailing sender id characters shown to staff
REFERENCE_TAG_LENGTH = 6

# =============================================================================
# Callback Actions
# =============================================================================

# Separator between the action kind and the sender id in callback data
ACTION_TOKEN_SEPARATOR = "_"

CONFIRM_BUTTON_LABEL = "✅ Confirm"
REJECT_BUTTON_LABEL = "❌ Reject"

# =============================================================================
# Message Texts
# =============================================================================

NOTIFICATION_HEADER = "📸 New order photo"

CONFIRMED_LABEL = "✅ CONFIRMED"
REJECTED_LABEL = "❌ REJECTED"
REPLY_FAILED_LABEL = "⚠️ Reply failed"

# Sent to the Facebook sender once staff decide
ORDER_CONFIRMED_TEXT = "✅ Your order has been confirmed. Thank you!"
ORDER_REJECTED_TEXT = "❌ Sorry, we could not accept your order."

# Sent to the Facebook sender when the cooldown denies a photo
RATE_LIMIT_NOTICE_TEMPLATE = (
    "Please wait {seconds} seconds before sending another photo."
)

# =============================================================================
# Provider APIs
# =============================================================================

# Facebook Graph API version
FACEBOOK_GRAPH_API_VERSION = "v18.0"

FACEBOOK_GRAPH_API_BASE_URL = "https://graph.facebook.com"

TELEGRAM_API_BASE_URL = "https://api.telegram.org"

# Telegram answers editMessageCaption with this when the caption is unchanged
TELEGRAM_NOT_MODIFIED_DESCRIPTION = "message is not modified"
