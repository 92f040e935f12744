"""
Venue Admin — Application Package
===================================

Admin API of the sports-venue booking platform: venues, employee roles,
slot times and venue expenses.

    ┌─────────────────────────────────────┐
    │   Routes + Dependencies (HTTP/auth) │
    ├─────────────────────────────────────┤
    │   Services (business rules, scope)  │
    ├─────────────────────────────────────┤
    │   Models & Schemas (ORM/pydantic)   │
    ├─────────────────────────────────────┤
    │   Database (async sessions)         │
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
