"""Unit tests for the SQLite VideoStore."""

import sqlite3

import pytest

from models.project import Caption, VideoSegment, VideoStatus
from services.errors import NotFoundOrUnauthorized, PreconditionError
from services.video_store import VideoStore, close_video_store, get_video_store


def make_caption(index: int, video_id: str, start: float, end: float, text: str = "line") -> Caption:
    return Caption(
        id=f"caption-{video_id[:8]}-{index}",
        video_id=video_id,
        text=f"{text} {index}",
        start_time=start,
        end_time=end,
    )


def make_segment(index: int, video_id: str, start: float, end: float) -> VideoSegment:
    return VideoSegment(
        id=f"vs-{video_id[:8]}-{index}",
        video_id=video_id,
        position=index,
        type="video",
        title=f"Segment {index + 1}",
        url=f"https://example.com/{index}.mp4",
        start_time=start,
        end_time=end,
        keywords=["sunset", "ocean"],
    )


@pytest.fixture
def video_factory(store, project):
    async def _create(status=VideoStatus.UPLOADING, user_id="user-1", project_id=None):
        return await store.create_video(
            user_id,
            project_id or project.id,
            title="Clip",
            filename="clip.mp4",
            status=status,
            original_url="/uploads/clip.mp4",
        )

    return _create


class TestProjects:
    """Project CRUD and owner scoping."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, store):
        project = await store.create_project("user-1", "Launch Teaser", description="Q3", script="Go.")

        loaded = await store.get_project(project.id, "user-1")
        assert loaded == project
        assert loaded.created_at == loaded.updated_at

    @pytest.mark.asyncio
    async def test_other_users_project_is_invisible(self, store, project):
        assert await store.get_project(project.id, "user-2") is None
        assert await store.get_project(project.id) is not None
        assert await store.list_projects("user-2") == []

    @pytest.mark.asyncio
    async def test_list_is_scoped_to_owner(self, store, project):
        await store.create_project("user-2", "Someone else's")
        projects = await store.list_projects("user-1")
        assert [p.id for p in projects] == [project.id]

    @pytest.mark.asyncio
    async def test_update_only_known_fields(self, store, project):
        updated = await store.update_project(project.id, "user-1", name="Renamed", owner="user-9")

        assert updated.name == "Renamed"
        assert updated.script == project.script
        assert updated.user_id == "user-1"

    @pytest.mark.asyncio
    async def test_update_not_owned_returns_none(self, store, project):
        assert await store.update_project(project.id, "user-2", name="Hijacked") is None
        assert (await store.get_project(project.id)).name == "Nature Reel"

    @pytest.mark.asyncio
    async def test_delete_cascades_to_videos_captions_and_segments(self, store, project, video_factory):
        video = await video_factory()
        await store.replace_captions(video.id, [make_caption(0, video.id, 0.0, 1.0)])
        await store.replace_video_segments(video.id, [make_segment(0, video.id, 0.0, 5.0)])

        assert await store.delete_project(project.id, "user-1") is True

        assert await store.get_video(video.id) is None
        assert await store.list_captions(video.id) == []
        assert await store.list_video_segments(video.id) == []

    @pytest.mark.asyncio
    async def test_delete_requires_ownership(self, store, project):
        assert await store.delete_project(project.id, "user-2") is False
        assert await store.delete_project("missing", "user-1") is False
        assert await store.get_project(project.id) is not None


class TestVideos:
    """Video CRUD."""

    @pytest.mark.asyncio
    async def test_create_defaults(self, store, video_factory):
        video = await video_factory()
        loaded = await store.get_video(video.id, "user-1")

        assert loaded.status == VideoStatus.UPLOADING
        assert loaded.processed_url == ""
        assert loaded.duration is None
        assert loaded.original_url == "/uploads/clip.mp4"

    @pytest.mark.asyncio
    async def test_video_requires_existing_project(self, store):
        with pytest.raises(sqlite3.IntegrityError):
            await store.create_video("user-1", "no-such-project", "Clip", "clip.mp4")

    @pytest.mark.asyncio
    async def test_list_filters_by_project(self, store, project, video_factory):
        other = await store.create_project("user-1", "Other")
        first = await video_factory()
        second = await video_factory(project_id=other.id)

        assert {v.id for v in await store.list_videos("user-1")} == {first.id, second.id}
        assert [v.id for v in await store.list_videos("user-1", other.id)] == [second.id]
        assert await store.list_videos("user-2") == []

    @pytest.mark.asyncio
    async def test_update_ignores_pipeline_fields(self, store, video_factory):
        video = await video_factory()
        updated = await store.update_video(
            video.id, "user-1", title="New title", status="READY", processed_url="x"
        )

        assert updated.title == "New title"
        assert updated.status == VideoStatus.UPLOADING
        assert updated.processed_url == ""

    @pytest.mark.asyncio
    async def test_delete_video(self, store, video_factory):
        video = await video_factory()
        assert await store.delete_video(video.id, "user-2") is False
        assert await store.delete_video(video.id, "user-1") is True
        assert await store.get_video(video.id) is None


class TestStatusTransitions:
    """set_status() and restart_video()."""

    @pytest.mark.asyncio
    async def test_forward_transition_records_artifacts(self, store, video_factory):
        video = await video_factory(status=VideoStatus.PROCESSING)

        updated = await store.set_status(
            video.id,
            VideoStatus.READY,
            processed_url="https://example.com/a.mp4",
            duration=12.5,
            title="ignored",
        )

        assert updated.status == VideoStatus.READY
        assert updated.processed_url == "https://example.com/a.mp4"
        assert updated.duration == 12.5
        assert updated.title == "Clip"

    @pytest.mark.asyncio
    async def test_backward_transition_is_rejected(self, store, video_factory):
        video = await video_factory(status=VideoStatus.READY)

        with pytest.raises(PreconditionError):
            await store.set_status(video.id, VideoStatus.TRANSCRIBING)
        assert (await store.get_video(video.id)).status == VideoStatus.READY

    @pytest.mark.asyncio
    async def test_expected_statuses_act_as_compare_and_set(self, store, video_factory):
        video = await video_factory(status=VideoStatus.UPLOADING)
        expected = (VideoStatus.UPLOADING, VideoStatus.PROCESSING)

        await store.set_status(video.id, VideoStatus.TRANSCRIBING, expected=expected)
        with pytest.raises(PreconditionError):
            await store.set_status(video.id, VideoStatus.TRANSCRIBING, expected=expected)

    @pytest.mark.asyncio
    async def test_same_status_is_allowed(self, store, video_factory):
        video = await video_factory(status=VideoStatus.ERROR)
        updated = await store.set_status(video.id, VideoStatus.ERROR)
        assert updated.status == VideoStatus.ERROR

    @pytest.mark.asyncio
    async def test_missing_video(self, store):
        with pytest.raises(NotFoundOrUnauthorized):
            await store.set_status("missing", VideoStatus.READY)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [VideoStatus.READY, VideoStatus.ERROR])
    async def test_restart_finished_video(self, store, video_factory, status):
        video = await video_factory(status=status)
        restarted = await store.restart_video(video.id)
        assert restarted.status == VideoStatus.PROCESSING

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [VideoStatus.PROCESSING, VideoStatus.TRANSCRIBING])
    async def test_restart_running_video_is_rejected(self, store, video_factory, status):
        video = await video_factory(status=status)
        with pytest.raises(PreconditionError):
            await store.restart_video(video.id)


class TestCaptions:
    """Caption storage."""

    @pytest.mark.asyncio
    async def test_replace_swaps_whole_set(self, store, video_factory):
        video = await video_factory()
        await store.replace_captions(video.id, [make_caption(i, video.id, i, i + 1, "old") for i in range(4)])
        await store.replace_captions(video.id, [make_caption(i, video.id, i * 2, i * 2 + 1, "new") for i in range(2)])

        captions = await store.list_captions(video.id)
        assert [c.text for c in captions] == ["new 0", "new 1"]

    @pytest.mark.asyncio
    async def test_failed_replace_keeps_previous_set(self, store, video_factory):
        video = await video_factory()
        await store.replace_captions(video.id, [make_caption(0, video.id, 0.0, 2.0, "kept")])

        broken = [
            make_caption(1, video.id, 0.0, 1.0, "new"),
            make_caption(2, video.id, 3.0, 3.0, "zero length"),
        ]
        with pytest.raises(sqlite3.IntegrityError):
            await store.replace_captions(video.id, broken)

        captions = await store.list_captions(video.id)
        assert [c.text for c in captions] == ["kept 0"]

    @pytest.mark.asyncio
    async def test_list_orders_by_start_time(self, store, video_factory):
        video = await video_factory()
        await store.replace_captions(
            video.id,
            [make_caption(0, video.id, 5.0, 6.0), make_caption(1, video.id, 1.0, 2.0)],
        )

        assert [c.start_time for c in await store.list_captions(video.id)] == [1.0, 5.0]

    @pytest.mark.asyncio
    async def test_get_caption_is_scoped_through_video_owner(self, store, video_factory):
        video = await video_factory()
        caption = make_caption(0, video.id, 0.0, 1.5)
        await store.replace_captions(video.id, [caption])

        assert await store.get_caption(caption.id, "user-1") == caption
        assert await store.get_caption(caption.id, "user-2") is None
        assert await store.get_caption("missing") is None

    @pytest.mark.asyncio
    async def test_update_and_delete_caption(self, store, video_factory):
        video = await video_factory()
        caption = make_caption(0, video.id, 0.0, 1.5)
        await store.replace_captions(video.id, [caption])

        caption.text = "Edited"
        caption.end_time = 2.0
        await store.update_caption(caption)
        assert (await store.get_caption(caption.id)).text == "Edited"

        assert await store.delete_caption(caption.id) is True
        assert await store.delete_caption(caption.id) is False
        assert await store.list_captions(video.id) == []


class TestVideoSegments:
    """Timeline storage."""

    @pytest.mark.asyncio
    async def test_round_trips_keywords_and_order(self, store, video_factory):
        video = await video_factory()
        segments = [make_segment(1, video.id, 5.0, 9.0), make_segment(0, video.id, 0.0, 5.0)]
        await store.replace_video_segments(video.id, segments)

        stored = await store.list_video_segments(video.id)
        assert [s.position for s in stored] == [0, 1]
        assert stored[0].keywords == ["sunset", "ocean"]
        assert stored[1].duration == 4.0


class TestSingleton:
    """Module-level accessors."""

    @pytest.mark.asyncio
    async def test_get_returns_same_instance(self, temp_dir):
        db_path = str(temp_dir / "nested" / "singleton.db")
        try:
            first = await get_video_store(db_path)
            second = await get_video_store(db_path)
            assert first is second
            assert (temp_dir / "nested" / "singleton.db").exists()
        finally:
            await close_video_store()

    @pytest.mark.asyncio
    async def test_use_before_connect(self, temp_dir):
        with pytest.raises(RuntimeError):
            await VideoStore(str(temp_dir / "x.db")).list_projects("user-1")
