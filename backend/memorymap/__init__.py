"""
Memory Map — Application Package
==================================

Visitors leave short geotagged messages ("memories") on a world map.

Layout:

    ┌─────────────────────────────────────┐
    │   mapview (client state + surface)  │  ← talks to the API over HTTP
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, persistence
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
