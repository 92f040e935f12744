"""
Venue Admin — API Routes Package
==================================

Route Inventory:
    - roles.py:           /add-role, /get-all-roles, /update-role,
                          /remove-roles, /fetch-roles
    - venues.py:          /add-venue, /get-venues, /update-venue,
                          /remove-venues, /fetch-venues, /venues
    - slot_times.py:      /add-slot-time, /get-slot-times, /update-slot-time,
                          /remove-slot-times, /get-available-slots,
                          /available-slots-for-event
    - venue_expenses.py:  /add-venue-expense, /get-venue-expenses,
                          /update-venue-expense, /remove-venue-expenses,
                          /download-expense-report
    - health.py:          /health

Routes are thin: authenticate, parse, call a service, wrap the result.
"""
