# agents/error_classifier.py
from enum import Enum

TRANSIENT_STATUSES = frozenset({408, 429, 500, 502, 503, 504})

# substring heuristics; tunable
QUOTA_MARKERS = ("quota", "billing")


class ErrorVerdict(Enum):
    QUOTA_EXHAUSTED = "quota_exhausted"
    TRANSIENT = "transient"
    PERMANENT = "permanent"


def error_message(error: BaseException) -> str:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or "Unknown Gemini error"


def error_status(error: BaseException) -> int:
    """
    HTTP status carried by an LLM error, or 0 when there is none.

    google.api_core errors expose it as ``code``; HTTP client errors as
    ``status_code`` or on their ``response``.
    """
    for attr in ("code", "status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return int(value)
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int) and not isinstance(value, bool):
        return int(value)
    return 0


def classify(error: BaseException) -> ErrorVerdict:
    message = error_message(error).lower()
    status = error_status(error)

    if any(marker in message for marker in QUOTA_MARKERS):
        return ErrorVerdict.QUOTA_EXHAUSTED
    if status == 429 and "exceed" in message:
        return ErrorVerdict.QUOTA_EXHAUSTED
    if status in TRANSIENT_STATUSES:
        return ErrorVerdict.TRANSIENT
    return ErrorVerdict.PERMANENT
