"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)

Design Decisions:
    - Separate from models: schemas are the JSON the frontend sees, models are rows
    - Comment length is NOT enforced here: core/enforce_social.py owns it so the 400 body
      has the same shape as every other domain validation error
"""
