"""Pydantic models shared by the severity, scoring, readiness and issuance engines."""
