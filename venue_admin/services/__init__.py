"""
Venue Admin — Services Layer
==============================

Service Inventory:
    - requester / scope:   who is asking and which rows they may see
    - permissions:         per-menu action checks
    - references:          live-record checks on referenced entities
    - filters:             query-string parsing and listing layers
    - RoleService, VenueService, SlotTimeService, ExpenseService
    - FileService:         venue image validation and storage
    - ReportService:       expense sheet → PDF
"""
