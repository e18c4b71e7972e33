import hashlib
import logging

# Create the library logger
logger = logging.getLogger("gridpager")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_token(token: str | None) -> str | None:
    """
    Redacts a continuation token for logging.

    Tokens often embed primary-key values, so only a short hash is logged.
    The hash still allows correlating the same token across log records.
    """
    if not token:
        return None
    try:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()[:8]
    except Exception:
        return "<redaction_failed>"
