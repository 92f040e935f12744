"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2026-10-16 00:00:00.000000+00:00

What:  Creates the administered tables (venues, roles, role permissions,
       slot times, venue expenses), the reference tables they point at,
       the slot association tables and the token blacklist.

Rollback: downgrade() drops every table (destructive).
"""

from typing import List, Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True, nullable=False)


def _status() -> List[sa.Column]:
    return [
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("soft_delete", sa.Boolean(), nullable=False, server_default=sa.false()),
    ]


def _timestamps() -> List[sa.Column]:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def _fk(name: str, target: str, nullable: bool = False, **kwargs) -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey(target, **kwargs), nullable=nullable)


def _period() -> sa.Column:
    return sa.Column("period", sa.String(10), primary_key=True, nullable=False)


def upgrade() -> None:
    # ── Reference tables ──────────────────────────────────────────────────
    op.create_table("cities", _id(), sa.Column("name", sa.String(100), nullable=False),
                    *_status(), *_timestamps())
    op.create_table("sports", _id(), sa.Column("name", sa.String(100), nullable=False),
                    sa.Column("icon", sa.String(255), nullable=True), *_status(), *_timestamps())
    op.create_table("menus", _id(), sa.Column("name", sa.String(50), nullable=False, unique=True),
                    *_status(), *_timestamps())

    # ── Venues ────────────────────────────────────────────────────────────
    op.create_table(
        "venues",
        _id(),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        _fk("city_id", "cities.id"),
        sa.Column("geo_location", sa.String(255), nullable=False, server_default=""),
        sa.Column("image", sa.JSON(), nullable=False),
        sa.Column("video", sa.JSON(), nullable=False),
        sa.Column("type", sa.String(50), nullable=True),
        *_status(),
        *_timestamps(),
    )
    op.create_index("idx_venues_city", "venues", ["city_id"])

    op.create_table(
        "venue_sports",
        _fk("venue_id", "venues.id", ondelete="CASCADE"),
        _fk("sport_id", "sports.id", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("venue_id", "sport_id"),
    )

    op.create_table(
        "grounds",
        _id(),
        sa.Column("name", sa.String(150), nullable=False),
        _fk("city_id", "cities.id"),
        _fk("venue_id", "venues.id"),
        *_status(),
        *_timestamps(),
    )

    # ── Roles ─────────────────────────────────────────────────────────────
    op.create_table(
        "roles",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        _fk("city_id", "cities.id", nullable=True),
        _fk("venue_id", "venues.id", nullable=True),
        sa.Column("added_by", sa.String(3), nullable=True),
        *_status(),
        *_timestamps(),
    )
    op.create_index("idx_roles_city_venue", "roles", ["city_id", "venue_id"])

    op.create_table(
        "role_permissions",
        _id(),
        _fk("role_id", "roles.id", ondelete="CASCADE"),
        _fk("menu_id", "menus.id"),
        sa.Column("add", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("view", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("update", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("delete", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    # ── Slot times ────────────────────────────────────────────────────────
    op.create_table(
        "slot_times",
        _id(),
        _fk("city_id", "cities.id"),
        _fk("venue_id", "venues.id"),
        _fk("ground_id", "grounds.id"),
        sa.Column("price", sa.JSON(), nullable=False),
        sa.Column("slot", sa.String(50), nullable=False),
        *_status(),
        *_timestamps(),
    )
    op.create_index(
        "uq_slot_times_ground_slot_live",
        "slot_times",
        ["ground_id", "slot"],
        unique=True,
        postgresql_where=sa.text("soft_delete = false"),
        sqlite_where=sa.text("soft_delete = 0"),
    )
    op.create_index("idx_slot_times_city_venue", "slot_times", ["city_id", "venue_id"])

    # ── Slot dependents ───────────────────────────────────────────────────
    for table in ("academies", "memberships"):
        op.create_table(
            table,
            _id(),
            sa.Column("name", sa.String(150), nullable=False),
            _fk("city_id", "cities.id"),
            _fk("ground_id", "grounds.id"),
            *_status(),
            *_timestamps(),
        )

    op.create_table(
        "academy_slots",
        _fk("academy_id", "academies.id", ondelete="CASCADE"),
        _fk("slot_time_id", "slot_times.id", ondelete="CASCADE"),
        _period(),
        sa.PrimaryKeyConstraint("academy_id", "slot_time_id", "period"),
    )
    op.create_table(
        "membership_slots",
        _fk("membership_id", "memberships.id", ondelete="CASCADE"),
        _fk("slot_time_id", "slot_times.id", ondelete="CASCADE"),
        _period(),
        sa.PrimaryKeyConstraint("membership_id", "slot_time_id", "period"),
    )

    op.create_table(
        "events",
        _id(),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("start_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("event_status", sa.String(20), nullable=False, server_default="UPCOMING"),
        *_status(),
        *_timestamps(),
    )
    op.create_table(
        "event_grounds",
        _fk("event_id", "events.id", ondelete="CASCADE"),
        _fk("ground_id", "grounds.id", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("event_id", "ground_id"),
    )
    op.create_table(
        "event_slots",
        _fk("event_id", "events.id", ondelete="CASCADE"),
        _fk("slot_time_id", "slot_times.id", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("event_id", "slot_time_id"),
    )

    op.create_table(
        "slot_bookings",
        _id(),
        _fk("ground_id", "grounds.id"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("booking_status", sa.String(20), nullable=False, server_default="BOOKED"),
        *_status(),
        *_timestamps(),
    )
    op.create_table(
        "slot_booking_slots",
        _fk("slot_booking_id", "slot_bookings.id", ondelete="CASCADE"),
        _fk("slot_time_id", "slot_times.id", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("slot_booking_id", "slot_time_id"),
    )

    # ── Venue expenses ────────────────────────────────────────────────────
    op.create_table(
        "venue_expenses",
        _id(),
        _fk("city_id", "cities.id"),
        _fk("venue_id", "venues.id"),
        sa.Column("month", sa.String(20), nullable=False),
        sa.Column("year", sa.String(4), nullable=False),
        sa.Column("expenses", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("month", "year", name="uq_venue_expenses_month_year"),
    )

    # ── Token blacklist ───────────────────────────────────────────────────
    op.create_table(
        "blacklisted_tokens",
        _id(),
        sa.Column("token", sa.Text(), nullable=False, unique=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
    )


def downgrade() -> None:
    for table in (
        "blacklisted_tokens",
        "venue_expenses",
        "slot_booking_slots",
        "slot_bookings",
        "event_slots",
        "event_grounds",
        "events",
        "membership_slots",
        "academy_slots",
        "memberships",
        "academies",
        "slot_times",
        "role_permissions",
        "roles",
        "grounds",
        "venue_sports",
        "venues",
        "menus",
        "sports",
        "cities",
    ):
        op.drop_table(table)
