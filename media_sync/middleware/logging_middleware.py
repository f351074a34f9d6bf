"""Logging helpers with sensitive data redaction."""

import re

# Signed cover-art URLs often carry credentials in their query string
SENSITIVE_PARAMS = [
    "api_key",
    "token",
    "signature",
    "sig",
    "secret",
    "key",
    "access_token",
    "auth_token",
    "authorization",
    "x-amz-signature",
    "x-amz-credential",
]


def redact_sensitive_data(url: str) -> str:
    """Redact sensitive query parameters from URL."""
    redacted = url
    for param in SENSITIVE_PARAMS:
        pattern = rf"(?i)([?&]{re.escape(param)}=)([^&\s\"]+)"
        redacted = re.sub(pattern, r"\1***REDACTED***", redacted)
    return redacted
