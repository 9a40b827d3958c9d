"""
Schemas module - pydantic models.

- schemas.py:    API contract (what clients send/receive)
- ai_schemas.py: inputs to the AI prompt builders and the JSON shapes the
                 model must return
"""
