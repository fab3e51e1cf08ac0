"""Failure classification."""

import re
from dataclasses import dataclass
from enum import Enum

from ..exceptions import MISSING_CREDENTIAL_SENTINEL


class ErrorCategory(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    BILLING = "billing"
    TOKEN_LIMIT_EXCEEDED = "token_limit_exceeded"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorClassification:
    category: ErrorCategory
    must_reauthenticate: bool = False


_INVALID_CREDENTIAL_RE = re.compile(
    r"key.*?not.*?valid"
    r"|invalid.*?key"
    r"|key.*?invalid"
    r"|permission.*?denied"
    r"|API_KEY_INVALID"
    r"|API.*?key.*?missing"
    r"|API.*?key.*?must.*?be.*?set"
    r"|requested.*?entity.*?was.*?not.*?found",
    re.IGNORECASE,
)
_BILLING_RE = re.compile(r"billing", re.IGNORECASE)
_TOKEN_LIMIT_RE = re.compile(
    r"token.*?limit|request.*?too.*?long|prompt.*?too.*?long",
    re.IGNORECASE,
)

# Evaluated in order, first match wins
_RULES = (
    (_INVALID_CREDENTIAL_RE, ErrorCategory.INVALID_CREDENTIAL),
    (_BILLING_RE, ErrorCategory.BILLING),
    (_TOKEN_LIMIT_RE, ErrorCategory.TOKEN_LIMIT_EXCEEDED),
)


def classify_error(raw_message: str) -> ErrorClassification:
    """Map raw provider/transport error text to a failure category.

    Args:
        raw_message: Error text as raised.

    Returns:
        Category; InvalidCredential also sets ``must_reauthenticate``.
    """
    if MISSING_CREDENTIAL_SENTINEL.lower() in raw_message.lower():
        return ErrorClassification(ErrorCategory.MISSING_CREDENTIAL)

    for pattern, category in _RULES:
        if pattern.search(raw_message):
            return ErrorClassification(
                category,
                must_reauthenticate=category is ErrorCategory.INVALID_CREDENTIAL,
            )

    return ErrorClassification(ErrorCategory.UNKNOWN)
