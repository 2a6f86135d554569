"""
MedWell Backend — Request/Response Schemas
============================================

Pydantic models for the API contract. Request models declare required names
as Optional so that presence is checked by the services, which report every
missing name in one 400 message; FastAPI still enforces the declared types.
"""
