import pytest

from kbchat.core.services.error_service import ErrorCategory, classify_error


@pytest.mark.parametrize(
    ("raw", "category"),
    [
        ("API_KEY_MISSING", ErrorCategory.MISSING_CREDENTIAL),
        ("API key not valid. Please pass a valid API key.", ErrorCategory.INVALID_CREDENTIAL),
        ("403 PERMISSION_DENIED: permission denied", ErrorCategory.INVALID_CREDENTIAL),
        ("The provided API key is invalid", ErrorCategory.INVALID_CREDENTIAL),
        ("Key not valid", ErrorCategory.INVALID_CREDENTIAL),
        ("key invalid for this project", ErrorCategory.INVALID_CREDENTIAL),
        ("Billing account not enabled", ErrorCategory.BILLING),
        ("input token count exceeds the token limit", ErrorCategory.TOKEN_LIMIT_EXCEEDED),
        ("Request too long for this model", ErrorCategory.TOKEN_LIMIT_EXCEEDED),
        ("prompt is too long", ErrorCategory.TOKEN_LIMIT_EXCEEDED),
        ("Connection reset by peer", ErrorCategory.UNKNOWN),
    ],
)
def test_classification(raw: str, category: ErrorCategory) -> None:
    assert classify_error(raw).category is category


def test_invalid_credential_wins_over_billing() -> None:
    result = classify_error("API key not valid; also check billing")

    assert result.category is ErrorCategory.INVALID_CREDENTIAL
    assert result.must_reauthenticate


def test_entity_not_found_requires_reauthentication() -> None:
    result = classify_error("Requested entity was not found")

    assert result.category is ErrorCategory.INVALID_CREDENTIAL
    assert result.must_reauthenticate is True


def test_missing_credential_does_not_require_reauthentication() -> None:
    result = classify_error("API_KEY_MISSING")

    assert result.must_reauthenticate is False


@pytest.mark.parametrize("raw", ["billing", "token limit", "boom"])
def test_only_invalid_credential_requires_reauthentication(raw: str) -> None:
    assert classify_error(raw).must_reauthenticate is False
