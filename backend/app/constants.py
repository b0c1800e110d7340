"""Application-wide constants."""

# Chat message roles
class MessageRole:
    """Chat message role constants."""
    USER = "user"
    MODEL = "model"
    SYSTEM = "system"


# Chat message actions rendered as buttons by the client
class MessageAction:
    """Chat message action constants."""
    GOTO_PREVIEW = "GOTO_PREVIEW"
    AWAITING_PLAN_APPROVAL = "AWAITING_PLAN_APPROVAL"


# Edit generator response types
class ResponseType:
    """Edit proposal response type constants."""
    CHAT = "CHAT"
    MODIFY_CODE = "MODIFY_CODE"
    PROJECT_PLAN = "PROJECT_PLAN"


# File change actions inside a MODIFY_CODE proposal
class ChangeAction:
    """File change action constants."""
    DELETE = "delete"


# Project configuration
DEFAULT_PROJECT_NAME = "New Project"
WELCOME_MESSAGE = (
    "Hello! I'm MominAI, your creative partner in building web applications. "
    "Describe the project you'd like to build and we can get started."
)

# Request headers
USER_EMAIL_HEADER = "X-User-Email"
ADMIN_KEY_HEADER = "X-Admin-Key"
