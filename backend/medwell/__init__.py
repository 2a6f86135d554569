"""
MedWell Backend — Application Package
=======================================

What: HTTP backend for the MedWell health-tracking application.
How:  FastAPI routes on top of thin services that each perform one MongoDB
      read/write (or one completion call) per request.

Layers:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, render results
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← presence checks, one store call
    ├─────────────────────────────────────┤
    │             Schemas (Data)          │  ← Pydantic request/response shapes
    ├─────────────────────────────────────┤
    │     Database / Completion provider  │  ← Mongo connector, Gemini client
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
