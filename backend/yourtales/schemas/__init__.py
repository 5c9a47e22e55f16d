# Schemas package init
"""
YourTales Backend - API Schemas
================================

What:  Pydantic models defining the API contract between frontend and backend.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate the OpenAPI documentation.

Schemas are separate from the SQLAlchemy models: the JSON shape (camelCase,
nested author bylines, no credentials) differs from the table layout.
"""
