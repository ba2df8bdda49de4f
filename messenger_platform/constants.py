"""Application-wide constants.

This module centralizes the Messenger Platform limits and Graph API settings
so the template builders, the Graph API wrappers and the configuration share
a single source of truth.
"""

# =============================================================================
# Facebook API
# =============================================================================

# Facebook Graph API version
FACEBOOK_GRAPH_API_VERSION = "v18.0"

# Base URL for all Graph API calls
FACEBOOK_GRAPH_API_URL = f"https://graph.facebook.com/{FACEBOOK_GRAPH_API_VERSION}"

# Timeout for Facebook Graph API calls (seconds)
FACEBOOK_API_TIMEOUT_SECONDS = 10.0

# App id Facebook reports for messages sent from the Page inbox
PAGE_INBOX_APP_ID = 26390203743090

# Messages outside this window need a message tag
STANDARD_MESSAGING_WINDOW_HOURS = 24

# =============================================================================
# Webhook
# =============================================================================

# The only webhook object type the dispatchers accept
WEBHOOK_OBJECT_PAGE = "page"

# Header carrying the HMAC-SHA256 signature of the raw request body
SIGNATURE_HEADER = "X-Hub-Signature-256"

# =============================================================================
# Quick Replies
# =============================================================================

MAX_QUICK_REPLY_TITLE_CHARS = 20
MAX_QUICK_REPLY_PAYLOAD_CHARS = 1000
MAX_QUICK_REPLIES = 13

# =============================================================================
# Button Template
# =============================================================================

MAX_BUTTON_TITLE_CHARS = 20
MAX_BUTTON_PAYLOAD_CHARS = 1000
MAX_BUTTON_TEMPLATE_TEXT_CHARS = 640
MAX_BUTTONS_PER_TEMPLATE = 3

# =============================================================================
# Generic, Coupon and Receipt Templates
# =============================================================================

MAX_TEMPLATE_TITLE_CHARS = 80
MAX_TEMPLATE_SUBTITLE_CHARS = 80
MAX_BUTTONS_PER_GENERIC_ELEMENT = 3
MAX_GENERIC_TEMPLATE_ELEMENTS = 10
MAX_RECEIPT_ELEMENTS = 100

# =============================================================================
# Attachments
# =============================================================================

MAX_IMAGES_PER_MESSAGE = 30
