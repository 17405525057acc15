"""
Domain constants used across services/routers.
"""

# Webhook request headers
SIGNATURE_HEADER = "paymongo-signature"

# Signature header parts in the "t=<ts>,te=<sig>,li=<sig>" form
SIGNATURE_TIMESTAMP_KEY = "t"
SIGNATURE_TEST_KEY = "te"
SIGNATURE_LIVE_KEY = "li"

# Order columns holding provider correlation IDs
SOURCE_ID_FIELD = "payment_source_id"
PAYMENT_ID_FIELD = "payment_payment_id"
CHECKOUT_SESSION_ID_FIELD = "payment_checkout_session_id"

CORRELATION_FIELDS = (SOURCE_ID_FIELD, PAYMENT_ID_FIELD, CHECKOUT_SESSION_ID_FIELD)

# Admin listing
MAX_PAGE_SIZE = 200
