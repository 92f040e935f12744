# Models package init: importing every module registers all tables on Base.metadata
from venue_admin.models.reference import (  # noqa: F401
    Academy,
    BlacklistedToken,
    BookingStatus,
    City,
    Event,
    EventStatus,
    Ground,
    Membership,
    Menu,
    SlotBooking,
    SlotPeriod,
    Sport,
    academy_slots,
    event_grounds,
    event_slots,
    membership_slots,
    slot_booking_slots,
    venue_sports,
)
from venue_admin.models.role import Role, RolePermission  # noqa: F401
from venue_admin.models.slot_time import SlotTime  # noqa: F401
from venue_admin.models.venue import Venue  # noqa: F401
from venue_admin.models.venue_expense import VenueExpense  # noqa: F401
