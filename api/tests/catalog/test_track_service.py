"""Tests for TrackService and cascading track deletion."""

import pytest
from app.core.exceptions import AuthenticationError, NotAuthorizedError, TrackNotFoundError
from app.core.identity import ANONYMOUS, CallerIdentity
from app.models.feedback import ReactionKind
from app.models.track import TrackCreate
from pydantic import ValidationError


def _create(**overrides) -> TrackCreate:
    data = dict(title="Glass Harbor", artist="Low Tide", duration=180.0)
    data.update(overrides)
    return TrackCreate(**data)


class TestTrackCreate:
    def test_genre_is_normalized(self):
        assert _create(genre="  Synthwave ").genre == "synthwave"
        assert _create(genre="   ").genre is None

    def test_rejects_non_positive_duration(self):
        with pytest.raises(ValidationError):
            _create(duration=0)

    def test_rejects_blank_title(self):
        with pytest.raises(ValidationError):
            _create(title="   ")


class TestTrackService:
    @pytest.mark.asyncio
    async def test_create_and_get(self, track_service, uploader, clock):
        track = await track_service.create_track(
            _create(allow_download=True, audio_quality="320k"), uploader
        )

        assert track.uploaded_by == uploader.user_id
        assert track.uploaded_at == clock.now
        fetched = await track_service.get_track(track.id)
        assert fetched == track
        assert fetched.allow_download is True

    @pytest.mark.asyncio
    async def test_anonymous_cannot_create(self, track_service):
        with pytest.raises(AuthenticationError):
            await track_service.create_track(_create(), ANONYMOUS)

    @pytest.mark.asyncio
    async def test_get_missing(self, track_service):
        assert await track_service.get_track("missing") is None
        with pytest.raises(TrackNotFoundError):
            await track_service.require_track("missing")

    @pytest.mark.asyncio
    async def test_list_newest_first(self, track_service, make_track, clock):
        first = await make_track("First")
        clock.advance(1_000)
        second = await make_track("Second")

        tracks = await track_service.list_tracks()
        assert [t.id for t in tracks] == [second.id, first.id]
        assert [t.id for t in await track_service.list_tracks(limit=1, offset=1)] == [
            first.id
        ]

    @pytest.mark.asyncio
    async def test_list_user_tracks(self, track_service, make_track, uploader):
        track = await make_track()
        other = CallerIdentity(user_id="someone-else")
        await track_service.create_track(_create(title="Other"), other)

        mine = await track_service.list_user_tracks(uploader)
        assert [t.id for t in mine] == [track.id]
        assert await track_service.list_user_tracks(ANONYMOUS) == []

    @pytest.mark.asyncio
    async def test_only_uploader_can_delete(self, track_service, make_track):
        track = await make_track()

        with pytest.raises(NotAuthorizedError):
            await track_service.delete_track(track.id, CallerIdentity(user_id="intruder"))
        with pytest.raises(AuthenticationError):
            await track_service.delete_track(track.id, ANONYMOUS)
        assert await track_service.get_track(track.id) is not None

    @pytest.mark.asyncio
    async def test_delete_missing(self, track_service, uploader):
        with pytest.raises(TrackNotFoundError):
            await track_service.delete_track("missing", uploader)

    @pytest.mark.asyncio
    async def test_delete_cascades_reactions_and_summary(
        self, track_service, feedback_service, database, make_track, uploader
    ):
        track = await make_track()
        await feedback_service.submit_reaction(
            track.id, ReactionKind.LOVE, CallerIdentity(user_id="fan")
        )

        await track_service.delete_track(track.id, uploader)

        async with database.connection() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM reactions WHERE track_id = ?", (track.id,)
            )
            assert (await cursor.fetchone())[0] == 0
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM feedback_summaries WHERE track_id = ?",
                (track.id,),
            )
            assert (await cursor.fetchone())[0] == 0
