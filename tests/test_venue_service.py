"""
Venue Admin — Venue Service Tests
===================================

What:  VenueService against an in-memory database; image storage goes to a
       temporary directory and MIME sniffing is mocked.

What we test:
    ✅ Names are word-capitalised and unique per city among live venues
    ✅ Admins cannot create venues outside their city
    ✅ Listings respect scope, filters and ordering
    ✅ Image updates store, delete and re-list files
    ✅ deleted_files may only name the updated venue's images
    ✅ Files are untouched when the row update fails
    ✅ Soft delete only touches venues in scope
"""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from venue_admin.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from venue_admin.models.venue import Venue
from venue_admin.schemas.venue import AddVenueRequest, UpdateVenueRequest
from venue_admin.services.file_service import FileService
from venue_admin.services.requester import Admin, SubAdmin, SuperAdmin
from venue_admin.services.venue_service import UploadedImage, VenueService, capitalize_words


def _add_request(seed, name="city stadium", city=None, sports=None) -> AddVenueRequest:
    return AddVenueRequest(
        city=city or seed.north.id,
        name=name,
        address="10 Market Road",
        geo_location="12.97,77.59",
        supported_sports=sports if sports is not None else [seed.football.id],
    )


def test_capitalize_words():
    assert capitalize_words("city STADIUM") == "City Stadium"
    assert capitalize_words("a  b") == "A  B"


class TestAddVenue:

    def setup_method(self):
        self.service = VenueService()

    @pytest.mark.asyncio
    async def test_creates_capitalised_venue(self, db_session, seed):
        created = await self.service.add_venue(db_session, SuperAdmin(), _add_request(seed))

        listed = await self.service.list_venues(db_session, SuperAdmin(), venue_ids=[created.id])
        venue = listed.venues[0]
        assert venue.name == "City Stadium"
        assert venue.city.name == "North"
        assert [s.name for s in venue.supported_sports] == ["Football"]
        assert venue.image == []

    @pytest.mark.asyncio
    async def test_duplicate_name_in_city_conflicts(self, db_session, seed):
        await self.service.add_venue(db_session, SuperAdmin(), _add_request(seed))
        with pytest.raises(ConflictError, match="Venue already exists"):
            await self.service.add_venue(db_session, SuperAdmin(), _add_request(seed, name="CITY stadium"))

    @pytest.mark.asyncio
    async def test_same_name_in_other_city_is_allowed(self, db_session, seed):
        await self.service.add_venue(db_session, SuperAdmin(), _add_request(seed))
        await self.service.add_venue(db_session, SuperAdmin(), _add_request(seed, city=seed.south.id))

    @pytest.mark.asyncio
    async def test_admin_outside_city_is_forbidden(self, db_session, seed):
        with pytest.raises(PermissionDeniedError):
            await self.service.add_venue(
                db_session, Admin(city_id=seed.north.id), _add_request(seed, city=seed.south.id)
            )

    @pytest.mark.asyncio
    async def test_inactive_city_is_rejected(self, db_session, seed):
        with pytest.raises(ValidationError, match="City does not exist or is disabled"):
            await self.service.add_venue(
                db_session, SuperAdmin(), _add_request(seed, city=seed.closed_city.id)
            )

    @pytest.mark.asyncio
    async def test_unknown_sport_is_rejected(self, db_session, seed):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.add_venue(
                db_session, SuperAdmin(), _add_request(seed, sports=[uuid.uuid4()])
            )
        assert exc_info.value.key == "supported_sports"


class TestListVenues:

    def setup_method(self):
        self.service = VenueService()

    @pytest.mark.asyncio
    async def test_admin_sees_own_city_only(self, db_session, seed):
        result = await self.service.list_venues(
            db_session, Admin(city_id=seed.north.id), city_id=seed.south.id
        )
        assert result.count == 2
        assert {v.name for v in result.venues} == {"Arena Stadium", "Dome"}

    @pytest.mark.asyncio
    async def test_sub_admin_sees_assigned_venues(self, db_session, seed):
        sub_admin = SubAdmin(city_id=seed.north.id, venue_ids=frozenset({seed.dome.id}))
        result = await self.service.list_venues(db_session, sub_admin)
        assert [v.name for v in result.venues] == ["Dome"]

    @pytest.mark.asyncio
    async def test_search_and_status(self, db_session, seed):
        await self.service.update_venue(
            db_session, SuperAdmin(), UpdateVenueRequest(id=seed.dome.id, city=seed.north.id, is_active=False)
        )

        found = await self.service.list_venues(db_session, SuperAdmin(), search="arena")
        assert [v.name for v in found.venues] == ["Arena Stadium"]

        inactive = await self.service.list_venues(db_session, SuperAdmin(), is_active=[False])
        assert [v.name for v in inactive.venues] == ["Dome"]

        both = await self.service.list_venues(db_session, SuperAdmin(), is_active=[True, False])
        assert both.count == 3

    @pytest.mark.asyncio
    async def test_order_by_name(self, db_session, seed):
        result = await self.service.list_venues(db_session, SuperAdmin(), order_by="name", sort="asc")
        assert [v.name for v in result.venues] == ["Arena Stadium", "Dome", "Field House"]

        result = await self.service.list_venues(db_session, SuperAdmin(), order_by="name", sort="desc")
        assert [v.name for v in result.venues] == ["Field House", "Dome", "Arena Stadium"]

    @pytest.mark.asyncio
    async def test_unknown_order_by(self, db_session, seed):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.list_venues(db_session, SuperAdmin(), order_by="password")
        assert exc_info.value.key == "orderBy"

    @pytest.mark.asyncio
    async def test_pagination_keeps_total_count(self, db_session, seed):
        result = await self.service.list_venues(
            db_session, SuperAdmin(), order_by="name", sort="asc", offset=1, limit=1
        )
        assert result.count == 3
        assert [v.name for v in result.venues] == ["Dome"]

    @pytest.mark.asyncio
    async def test_fetch_and_public_options(self, db_session, seed):
        admin_options = await self.service.fetch_venues(db_session, Admin(city_id=seed.north.id))
        assert [o.name for o in admin_options] == ["Arena Stadium", "Dome"]

        public = await self.service.public_venues(db_session, city_id=seed.south.id)
        assert [o.name for o in public] == ["Field House"]


class TestUpdateVenue:

    def setup_method(self):
        self.service = VenueService()

    @pytest.fixture
    def files(self, tmp_path):
        """A FileService rooted in tmp_path with libmagic reporting PNG."""
        service = FileService(storage_root=str(tmp_path))
        magic = MagicMock()
        magic.from_buffer.return_value = "image/png"
        with patch("venue_admin.services.venue_service.file_service", service), \
             patch.dict("sys.modules", {"magic": magic}):
            yield service

    @pytest.mark.asyncio
    async def test_updates_fields_and_sports(self, db_session, seed):
        await self.service.update_venue(
            db_session,
            SuperAdmin(),
            UpdateVenueRequest(
                id=seed.arena.id,
                city=seed.north.id,
                name="grand arena",
                supported_sports=[seed.cricket.id, seed.football.id],
            ),
        )

        listed = await self.service.list_venues(db_session, SuperAdmin(), venue_ids=[seed.arena.id])
        venue = listed.venues[0]
        assert venue.name == "Grand Arena"
        assert venue.address == "1 Arena Road"
        assert {s.name for s in venue.supported_sports} == {"Cricket", "Football"}

    @pytest.mark.asyncio
    async def test_rename_onto_existing_venue_conflicts(self, db_session, seed):
        with pytest.raises(ConflictError):
            await self.service.update_venue(
                db_session, SuperAdmin(), UpdateVenueRequest(id=seed.arena.id, city=seed.north.id, name="dome")
            )

    @pytest.mark.asyncio
    async def test_out_of_scope_venue_is_not_found(self, db_session, seed):
        with pytest.raises(NotFoundError):
            await self.service.update_venue(
                db_session,
                Admin(city_id=seed.north.id),
                UpdateVenueRequest(id=seed.field.id, city=seed.south.id),
            )

    @pytest.mark.asyncio
    async def test_admin_cannot_move_venue_out_of_city(self, db_session, seed):
        with pytest.raises(PermissionDeniedError):
            await self.service.update_venue(
                db_session,
                Admin(city_id=seed.north.id),
                UpdateVenueRequest(id=seed.arena.id, city=seed.south.id),
            )

    @pytest.mark.asyncio
    async def test_images_stored_and_deleted(self, db_session, seed, files):
        await self.service.update_venue(
            db_session,
            SuperAdmin(),
            UpdateVenueRequest(id=seed.arena.id, city=seed.north.id),
            images=[UploadedImage("front.png", b"png-1"), UploadedImage("side.png", b"png-2")],
        )
        venue = await db_session.get(Venue, seed.arena.id)
        front = f"venues/{seed.arena.id}-front.png"
        side = f"venues/{seed.arena.id}-side.png"
        assert venue.image == [front, side]

        await self.service.update_venue(
            db_session,
            SuperAdmin(),
            UpdateVenueRequest(id=seed.arena.id, city=seed.north.id, deleted_files=[front]),
        )
        assert venue.image == [side]
        assert not (files.storage_root / front).exists()

    @pytest.mark.asyncio
    async def test_bad_image_rejects_whole_update(self, db_session, seed, files):
        with pytest.raises(ValidationError, match="not supported"):
            await self.service.update_venue(
                db_session,
                SuperAdmin(),
                UpdateVenueRequest(id=seed.arena.id, city=seed.north.id, name="renamed"),
                images=[UploadedImage("ok.png", b"png"), UploadedImage("clip.gif", b"gif")],
            )
        assert files.list_venue_images(seed.arena.id) == []

    @pytest.mark.asyncio
    async def test_cannot_delete_images_of_another_venue(self, db_session, seed, files):
        south_image = await files.store_venue_image(seed.field.id, "pitch.png", b"png")

        with pytest.raises(ValidationError, match="Invalid file path") as exc_info:
            await self.service.update_venue(
                db_session,
                Admin(city_id=seed.north.id),
                UpdateVenueRequest(id=seed.arena.id, city=seed.north.id, deleted_files=[south_image]),
            )

        assert exc_info.value.key == "deleted_files"
        assert (files.storage_root / south_image).exists()

    @pytest.mark.asyncio
    async def test_database_failure_leaves_images_untouched(self, db_session, seed, files):
        front = await files.store_venue_image(seed.arena.id, "front.png", b"png")

        with patch.object(db_session, "flush", AsyncMock(side_effect=SQLAlchemyError("disk full"))):
            with pytest.raises(DatabaseError):
                await self.service.update_venue(
                    db_session,
                    SuperAdmin(),
                    UpdateVenueRequest(id=seed.arena.id, city=seed.north.id, deleted_files=[front]),
                    images=[UploadedImage("side.png", b"png")],
                )

        assert files.list_venue_images(seed.arena.id) == [front]

    @pytest.mark.asyncio
    async def test_listing_reads_images_from_directory(self, db_session, seed, files):
        front = await files.store_venue_image(seed.arena.id, "front.png", b"png")

        listed = await self.service.list_venues(db_session, SuperAdmin(), venue_ids=[seed.arena.id])

        assert listed.venues[0].image == [front]

    @pytest.mark.asyncio
    async def test_delete_outside_storage_root_is_rejected(self, db_session, seed, files):
        with pytest.raises(ValidationError, match="Invalid file path"):
            await self.service.update_venue(
                db_session,
                SuperAdmin(),
                UpdateVenueRequest(id=seed.arena.id, city=seed.north.id, deleted_files=["../../etc/passwd"]),
            )


class TestRemoveVenues:

    def setup_method(self):
        self.service = VenueService()

    @pytest.mark.asyncio
    async def test_soft_delete_within_scope(self, db_session, seed):
        admin = Admin(city_id=seed.north.id)
        removed = await self.service.remove_venues(db_session, admin, [seed.arena.id, seed.field.id])
        assert removed == 1

        flags = dict((await db_session.execute(select(Venue.id, Venue.soft_delete))).all())
        assert flags[seed.arena.id] is True
        assert flags[seed.field.id] is False

        listed = await self.service.list_venues(db_session, admin)
        assert [v.name for v in listed.venues] == ["Dome"]

    @pytest.mark.asyncio
    async def test_removed_name_can_be_reused(self, db_session, seed):
        await self.service.remove_venues(db_session, SuperAdmin(), [seed.dome.id])
        await self.service.add_venue(db_session, SuperAdmin(), _add_request(seed, name="dome"))
