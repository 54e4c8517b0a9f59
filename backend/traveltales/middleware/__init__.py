# Middleware package init
"""
TravelTales Backend: Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive clients before any processing
    2. Request ID: correlation id for logs and the X-Request-ID header
    3. Logging: access line with status and duration, tagged with the request id
    4. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
