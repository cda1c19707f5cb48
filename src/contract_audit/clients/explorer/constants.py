"""Shared constants for Etherscan-family explorer calls."""

# Documented public placeholder; most Etherscan-family explorers reject an empty key
PUBLIC_API_KEY_PLACEHOLDER = "YourApiKeyToken"

STATUS_SUCCESS = "1"
STATUS_FAILURE = "0"

EXPLORER_TIMEOUT = 10  # seconds, per request

ZERO_ADDRESS = "0x" + "0" * 40
