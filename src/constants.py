"""Application-wide constants.

This module centralizes all magic numbers, payload tokens and platform
limits to ensure a single source of truth and easier maintenance.
"""

# =============================================================================
# HTTP Timeout Configuration
# =============================================================================

# Timeout for Facebook Graph API calls (seconds)
FACEBOOK_API_TIMEOUT_SECONDS = 10.0

# Maximum characters of a failed Send API response body kept in logs
ERROR_BODY_LOG_CHARS = 500

# =============================================================================
# Facebook API
# =============================================================================

# Facebook Graph API version
FACEBOOK_GRAPH_API_VERSION = "v18.0"

# Header carrying the HMAC of the raw request body
SIGNATURE_HEADER = "x-hub-signature"

# Only SHA-1 signatures are issued in the X-Hub-Signature header
SIGNATURE_METHOD = "sha1"

# Generic template carousel limits enforced by the Send API
MIN_CAROUSEL_CARDS = 2
MAX_CAROUSEL_CARDS = 10

# Quick replies allowed on a single message
MAX_QUICK_REPLIES = 13

# Postback buttons allowed on a single carousel card
MAX_CARD_BUTTONS = 3

# =============================================================================
# Assets
# =============================================================================

# Path on SERVER_URL where the step screenshots are served
SCREENSHOT_ASSET_PATH = "/assets/screenshots/"

# =============================================================================
# Menu Payload Tokens
# =============================================================================

# Prefix of every topic token, e.g. QR_PHOTO_2
TOPIC_TOKEN_PREFIX = "QR"

# Returns the user to the top-level feature prompt
RESTART_PAYLOAD = "RESTART"

# Payload configured on the Page's "Get Started" button
GET_STARTED_PAYLOAD = "GET_STARTED"

# Step index Branching mode writes into its tokens (ignored when read back)
BRANCHING_TOKEN_STEP = 1

# =============================================================================
# Menu Copy
# =============================================================================

TOP_LEVEL_PROMPT_TEXT = "Select a feature to learn more."
RESTART_TITLE = "Restart"
CONTINUE_TITLE = "Continue"
EXPLORE_ANOTHER_TITLE = "Explore another feature"
ATTACHMENT_RECEIVED_TEXT = "Message with attachment received"

# =============================================================================
# Text Commands
# =============================================================================

# Typed commands that open the top-level prompt
HELP_COMMANDS = frozenset({"help", "menu", "start"})

# Typed commands mapped to sender actions
SENDER_ACTION_COMMANDS = {
    "typing on": "typing_on",
    "typing off": "typing_off",
    "mark seen": "mark_seen",
}
