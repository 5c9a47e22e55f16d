# Middleware package init
"""
YourTales Backend - Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Path Normalization] → [Rate Limit] → [Request ID] → [Logging]
            → [GZip] → [CORS] → Route Handler

    1. Path Normalization: "//" collapsed before anything matches on the path
    2. Rate Limit: abusive clients rejected before any processing
    3. Request ID: correlation ID available to every later log line
    4. Logging: status and duration, tagged with the request ID
    5. GZip / CORS: Starlette built-ins (CORS answers preflight requests)

    Responses travel back through the chain in reverse order.
"""
