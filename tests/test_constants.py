"""
Test constants for consistent test data.

This module provides constants for users, status codes, and other
test values to avoid magic strings and improve test maintainability.
"""

# Users known to the fake token verifier
ALICE_UID = "alice-uid"
BOB_UID = "bob-uid"
ALICE_TOKEN = "token-alice"
BOB_TOKEN = "token-bob"
INVALID_TOKEN = "token-forged"

# Well-formed ids that never exist in test storage
MISSING_ID = "0123456789abcdef01234567"
MALFORMED_ID = "not-an-id"

# HTTP Status Codes
HTTP_OK = 200
HTTP_CREATED = 201
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_METHOD_NOT_ALLOWED = 405
HTTP_CONFLICT = 409
HTTP_UNPROCESSABLE_ENTITY = 422
HTTP_TOO_MANY_REQUESTS = 429
HTTP_INTERNAL_SERVER_ERROR = 500
HTTP_BAD_GATEWAY = 502
HTTP_SERVICE_UNAVAILABLE = 503

# Common test values
EMPTY_STRING = ""
WHITESPACE_ONLY = "   \t   "
REWRITE_SAMPLE = "The old house stood silent at the end of the lane."
