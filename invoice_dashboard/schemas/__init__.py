"""
Pydantic schemas for form payloads, form state and API responses.
"""
