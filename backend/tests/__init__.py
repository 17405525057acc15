"""
Pytest suite for the Storefront Payments API.

Test categories:
- Unit tests: signature checks, auth helpers, provider client with mocked HTTP
- Integration tests: services against in-memory SQLite
- API tests: full FastAPI app through httpx ASGITransport
"""
