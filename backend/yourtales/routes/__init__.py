# Routes package init
"""
YourTales Backend - API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.
How:   One APIRouter per resource, each mounted under its own prefix.

Route Inventory:
    - users.py:          /api/users          accounts, OTP, login, profile
    - manuscripts.py:    /api/manuscripts    manuscripts, stats, invitations
    - chapters.py:       /api/chapters       chapters of a manuscript
    - comments.py:       /api/comments       comments and reviews on chapters
    - notifications.py:  /api/notifications  the caller's notification feed
    - health.py:         /health             service health check

Design Principle:
    Routes stay THIN: they pull the body, path and query values, resolve the
    caller with get_current_user, and hand everything to a service. Status
    codes for failures come from the exception handlers in main.py.

    Collection routes answer both with and without a trailing slash; the
    slash form is kept out of the OpenAPI schema.
"""
