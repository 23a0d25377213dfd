"""SQLite-based persistent storage for projects, videos, captions and timelines.

Uses aiosqlite for async database operations. A single connection is shared
by the API handlers and the background pipelines, so every write goes
through one asyncio.Lock and batch replacements run in one transaction.
"""

import asyncio
import json
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

import aiosqlite

from models.project import Caption, Project, Video, VideoSegment, VideoStatus
from services.errors import NotFoundOrUnauthorized, PreconditionError

logger = logging.getLogger(__name__)

# Default database path
DEFAULT_DB_PATH = ".reelsmith/reelsmith.db"

SCHEMA = """
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    script TEXT,
    medium TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS videos (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    project_id TEXT NOT NULL REFERENCES projects (id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    description TEXT,
    filename TEXT NOT NULL,
    original_url TEXT NOT NULL DEFAULT '',
    processed_url TEXT NOT NULL DEFAULT '',
    duration REAL,
    size INTEGER,
    format TEXT,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS captions (
    id TEXT PRIMARY KEY,
    video_id TEXT NOT NULL REFERENCES videos (id) ON DELETE CASCADE,
    text TEXT NOT NULL,
    start_time REAL NOT NULL,
    end_time REAL NOT NULL,
    language TEXT NOT NULL DEFAULT 'en',
    CHECK (end_time > start_time)
);

CREATE TABLE IF NOT EXISTS video_segments (
    id TEXT PRIMARY KEY,
    video_id TEXT NOT NULL REFERENCES videos (id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    type TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    url TEXT NOT NULL,
    thumbnail TEXT,
    start_time REAL NOT NULL,
    end_time REAL NOT NULL,
    keywords JSON
);

CREATE INDEX IF NOT EXISTS idx_projects_user ON projects (user_id, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_videos_user ON videos (user_id, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_videos_project ON videos (project_id);
CREATE INDEX IF NOT EXISTS idx_captions_video ON captions (video_id, start_time);
CREATE INDEX IF NOT EXISTS idx_segments_video ON video_segments (video_id, start_time, position);
"""

PROJECT_FIELDS = ("name", "description", "script", "medium")
VIDEO_OWNER_FIELDS = ("title", "description")
VIDEO_ARTIFACT_FIELDS = ("original_url", "processed_url", "duration")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class VideoStore:
    """Async SQLite storage for the reelsmith entities.

    Owner-scoped lookups take an optional user_id; when given, rows owned by
    someone else are treated as missing.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """Initialize video store with database path.

        Args:
            db_path: Path to SQLite database file. Parent directory
                     will be created if it doesn't exist.
        """
        self.db_path = Path(db_path)
        self.db: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Open the connection, enable cascades and create the schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.db = await aiosqlite.connect(str(self.db_path))
        self.db.row_factory = aiosqlite.Row

        # Enable WAL mode for better concurrent read performance
        await self.db.execute("PRAGMA journal_mode=WAL")
        await self.db.execute("PRAGMA foreign_keys=ON")
        await self.db.executescript(SCHEMA)
        await self.db.commit()
        logger.info(f"Video store connected: {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self.db:
            await self.db.close()
            self.db = None
            logger.info("Video store connection closed")

    def _conn(self) -> aiosqlite.Connection:
        if self.db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.db

    @asynccontextmanager
    async def _transaction(self):
        """Serialize a write and commit it, or roll everything back on error."""
        db = self._conn()
        async with self._write_lock:
            try:
                yield db
            except BaseException:
                await db.rollback()
                raise
            await db.commit()

    async def _fetchone(self, query: str, params: Iterable[Any]) -> Optional[aiosqlite.Row]:
        async with self._conn().execute(query, tuple(params)) as cursor:
            return await cursor.fetchone()

    async def _fetchall(self, query: str, params: Iterable[Any]) -> list[aiosqlite.Row]:
        async with self._conn().execute(query, tuple(params)) as cursor:
            return list(await cursor.fetchall())

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def create_project(
        self,
        user_id: str,
        name: str,
        description: Optional[str] = None,
        script: Optional[str] = None,
        medium: Optional[str] = None,
    ) -> Project:
        """Create a project owned by user_id."""
        now = _now()
        project = Project(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            description=description,
            script=script,
            medium=medium,
            created_at=now,
            updated_at=now,
        )
        async with self._transaction() as db:
            await db.execute(
                "INSERT INTO projects (id, user_id, name, description, script, medium, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (project.id, user_id, name, description, script, medium, now, now),
            )
        logger.info(f"Created project {project.id}")
        return project

    async def get_project(self, project_id: str, user_id: Optional[str] = None) -> Optional[Project]:
        """Get a project by ID, or None if missing or owned by someone else."""
        row = await self._fetchone("SELECT * FROM projects WHERE id = ?", (project_id,))
        if row is None or (user_id is not None and row["user_id"] != user_id):
            return None
        return self._row_to_project(row)

    async def list_projects(self, user_id: str) -> list[Project]:
        """List a user's projects, newest first."""
        rows = await self._fetchall(
            "SELECT * FROM projects WHERE user_id = ? ORDER BY created_at DESC", (user_id,)
        )
        return [self._row_to_project(row) for row in rows]

    async def update_project(self, project_id: str, user_id: str, **fields: Any) -> Optional[Project]:
        """Update name, description, script or medium of an owned project.

        Returns:
            Updated project or None if not found
        """
        updates = {key: value for key, value in fields.items() if key in PROJECT_FIELDS}
        if await self.get_project(project_id, user_id) is None:
            return None

        if updates:
            assignments = ", ".join(f"{key} = ?" for key in updates)
            async with self._transaction() as db:
                await db.execute(
                    f"UPDATE projects SET {assignments}, updated_at = ? WHERE id = ? AND user_id = ?",
                    (*updates.values(), _now(), project_id, user_id),
                )
            logger.debug(f"Updated project {project_id}: {sorted(updates)}")

        return await self.get_project(project_id, user_id)

    async def delete_project(self, project_id: str, user_id: str) -> bool:
        """Delete an owned project together with its videos, captions and segments."""
        async with self._transaction() as db:
            cursor = await db.execute(
                "DELETE FROM projects WHERE id = ? AND user_id = ?", (project_id, user_id)
            )
            deleted = cursor.rowcount > 0
            await cursor.close()
        if deleted:
            logger.info(f"Deleted project {project_id}")
        return deleted

    # ------------------------------------------------------------------
    # Videos
    # ------------------------------------------------------------------

    async def create_video(
        self,
        user_id: str,
        project_id: str,
        title: str,
        filename: str,
        status: VideoStatus = VideoStatus.UPLOADING,
        description: Optional[str] = None,
        original_url: str = "",
        size: Optional[int] = None,
        format: Optional[str] = None,
    ) -> Video:
        """Create a video record inside a project."""
        now = _now()
        video = Video(
            id=str(uuid.uuid4()),
            user_id=user_id,
            project_id=project_id,
            title=title,
            filename=filename,
            status=status,
            description=description,
            original_url=original_url,
            size=size,
            format=format,
            created_at=now,
            updated_at=now,
        )
        async with self._transaction() as db:
            await db.execute(
                "INSERT INTO videos (id, user_id, project_id, title, description, filename, original_url, "
                "processed_url, duration, size, format, status, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, '', NULL, ?, ?, ?, ?, ?)",
                (
                    video.id,
                    user_id,
                    project_id,
                    title,
                    description,
                    filename,
                    original_url,
                    size,
                    format,
                    status.value,
                    now,
                    now,
                ),
            )
        logger.info(f"Created video {video.id} in project {project_id} ({status.value})")
        return video

    async def get_video(self, video_id: str, user_id: Optional[str] = None) -> Optional[Video]:
        """Get a video by ID, or None if missing or owned by someone else."""
        row = await self._fetchone("SELECT * FROM videos WHERE id = ?", (video_id,))
        if row is None or (user_id is not None and row["user_id"] != user_id):
            return None
        return self._row_to_video(row)

    async def list_videos(self, user_id: str, project_id: Optional[str] = None) -> list[Video]:
        """List a user's videos, newest first, optionally within one project."""
        query = "SELECT * FROM videos WHERE user_id = ?"
        params: list[Any] = [user_id]
        if project_id:
            query += " AND project_id = ?"
            params.append(project_id)
        query += " ORDER BY created_at DESC"

        rows = await self._fetchall(query, params)
        return [self._row_to_video(row) for row in rows]

    async def update_video(self, video_id: str, user_id: str, **fields: Any) -> Optional[Video]:
        """Update the owner-editable fields (title, description) of a video."""
        updates = {key: value for key, value in fields.items() if key in VIDEO_OWNER_FIELDS}
        if await self.get_video(video_id, user_id) is None:
            return None

        if updates:
            assignments = ", ".join(f"{key} = ?" for key in updates)
            async with self._transaction() as db:
                await db.execute(
                    f"UPDATE videos SET {assignments}, updated_at = ? WHERE id = ? AND user_id = ?",
                    (*updates.values(), _now(), video_id, user_id),
                )

        return await self.get_video(video_id, user_id)

    async def set_status(
        self,
        video_id: str,
        status: VideoStatus,
        expected: Optional[Iterable[VideoStatus]] = None,
        **artifacts: Any,
    ) -> Video:
        """Move a video to a new pipeline status, optionally recording artifacts.

        The read and the write happen under the write lock, so the check
        works as a compare-and-set between concurrent callers.

        Args:
            video_id: Video to update
            status: Target status
            expected: Statuses the video must currently be in. When omitted,
                the move must be a forward transition (or keep the status).
            **artifacts: original_url, processed_url and/or duration

        Returns:
            The updated video

        Raises:
            NotFoundOrUnauthorized: Video does not exist
            PreconditionError: Video is not in an allowed status
        """
        updates = {key: value for key, value in artifacts.items() if key in VIDEO_ARTIFACT_FIELDS}

        async with self._transaction() as db:
            async with db.execute("SELECT status FROM videos WHERE id = ?", (video_id,)) as cursor:
                row = await cursor.fetchone()
            if row is None:
                raise NotFoundOrUnauthorized("Video", video_id)

            current = VideoStatus(row["status"])
            if expected is not None:
                allowed = current in set(expected)
            else:
                allowed = current == status or current.can_transition_to(status)
            if not allowed:
                raise PreconditionError(
                    f"Video {video_id} is {current.value}, cannot move to {status.value}"
                )

            assignments = "".join(f", {key} = ?" for key in updates)
            await db.execute(
                f"UPDATE videos SET status = ?{assignments}, updated_at = ? WHERE id = ?",
                (status.value, *updates.values(), _now(), video_id),
            )

        logger.info(f"Video {video_id}: {current.value} -> {status.value}")
        video = await self.get_video(video_id)
        if video is None:
            raise NotFoundOrUnauthorized("Video", video_id)
        return video

    async def restart_video(self, video_id: str) -> Video:
        """Put a finished (READY or ERROR) video back into PROCESSING for a new run."""
        return await self.set_status(
            video_id,
            VideoStatus.PROCESSING,
            expected=(VideoStatus.READY, VideoStatus.ERROR),
        )

    async def delete_video(self, video_id: str, user_id: str) -> bool:
        """Delete an owned video together with its captions and segments."""
        async with self._transaction() as db:
            cursor = await db.execute("DELETE FROM videos WHERE id = ? AND user_id = ?", (video_id, user_id))
            deleted = cursor.rowcount > 0
            await cursor.close()
        if deleted:
            logger.info(f"Deleted video {video_id}")
        return deleted

    # ------------------------------------------------------------------
    # Captions
    # ------------------------------------------------------------------

    async def replace_captions(self, video_id: str, captions: list[Caption]) -> None:
        """Swap the whole caption set of a video in one transaction.

        If any insert fails the previous set is left untouched.
        """
        async with self._transaction() as db:
            await db.execute("DELETE FROM captions WHERE video_id = ?", (video_id,))
            await db.executemany(
                "INSERT INTO captions (id, video_id, text, start_time, end_time, language) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                [(c.id, video_id, c.text, c.start_time, c.end_time, c.language) for c in captions],
            )
        logger.info(f"Stored {len(captions)} captions for video {video_id}")

    async def list_captions(self, video_id: str) -> list[Caption]:
        """List a video's captions ordered by start time."""
        rows = await self._fetchall(
            "SELECT * FROM captions WHERE video_id = ? ORDER BY start_time ASC", (video_id,)
        )
        return [self._row_to_caption(row) for row in rows]

    async def get_caption(self, caption_id: str, user_id: Optional[str] = None) -> Optional[Caption]:
        """Get a caption, or None if missing or its video belongs to someone else."""
        row = await self._fetchone(
            "SELECT captions.*, videos.user_id AS owner_id FROM captions "
            "JOIN videos ON videos.id = captions.video_id WHERE captions.id = ?",
            (caption_id,),
        )
        if row is None or (user_id is not None and row["owner_id"] != user_id):
            return None
        return self._row_to_caption(row)

    async def update_caption(self, caption: Caption) -> Caption:
        """Persist edited text and timing of an existing caption."""
        async with self._transaction() as db:
            await db.execute(
                "UPDATE captions SET text = ?, start_time = ?, end_time = ? WHERE id = ?",
                (caption.text, caption.start_time, caption.end_time, caption.id),
            )
        return caption

    async def delete_caption(self, caption_id: str) -> bool:
        """Delete a single caption."""
        async with self._transaction() as db:
            cursor = await db.execute("DELETE FROM captions WHERE id = ?", (caption_id,))
            deleted = cursor.rowcount > 0
            await cursor.close()
        return deleted

    # ------------------------------------------------------------------
    # Timeline segments
    # ------------------------------------------------------------------

    async def replace_video_segments(self, video_id: str, segments: list[VideoSegment]) -> None:
        """Swap a video's whole timeline in one transaction."""
        async with self._transaction() as db:
            await db.execute("DELETE FROM video_segments WHERE video_id = ?", (video_id,))
            await db.executemany(
                "INSERT INTO video_segments (id, video_id, position, type, title, description, url, "
                "thumbnail, start_time, end_time, keywords) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        s.id,
                        video_id,
                        s.position,
                        s.type,
                        s.title,
                        s.description,
                        s.url,
                        s.thumbnail,
                        s.start_time,
                        s.end_time,
                        json.dumps(s.keywords),
                    )
                    for s in segments
                ],
            )
        logger.info(f"Stored {len(segments)} timeline segments for video {video_id}")

    async def list_video_segments(self, video_id: str) -> list[VideoSegment]:
        """List a video's timeline ordered by start time, then assembly order."""
        rows = await self._fetchall(
            "SELECT * FROM video_segments WHERE video_id = ? ORDER BY start_time ASC, position ASC",
            (video_id,),
        )
        return [self._row_to_segment(row) for row in rows]

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _row_to_project(self, row: aiosqlite.Row) -> Project:
        return Project(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row["description"],
            script=row["script"],
            medium=row["medium"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _row_to_video(self, row: aiosqlite.Row) -> Video:
        return Video(
            id=row["id"],
            user_id=row["user_id"],
            project_id=row["project_id"],
            title=row["title"],
            filename=row["filename"],
            status=VideoStatus(row["status"]),
            description=row["description"],
            original_url=row["original_url"],
            processed_url=row["processed_url"],
            duration=row["duration"],
            size=row["size"],
            format=row["format"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _row_to_caption(self, row: aiosqlite.Row) -> Caption:
        return Caption(
            id=row["id"],
            video_id=row["video_id"],
            text=row["text"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            language=row["language"],
        )

    def _row_to_segment(self, row: aiosqlite.Row) -> VideoSegment:
        keywords_str = row["keywords"]
        try:
            keywords = json.loads(keywords_str) if keywords_str else []
        except json.JSONDecodeError:
            logger.warning(f"Failed to parse keywords for segment {row['id']}")
            keywords = []

        return VideoSegment(
            id=row["id"],
            video_id=row["video_id"],
            position=row["position"],
            type=row["type"],
            title=row["title"],
            description=row["description"],
            url=row["url"],
            thumbnail=row["thumbnail"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            keywords=keywords,
        )


# Module-level singleton
_video_store: VideoStore | None = None


async def get_video_store(db_path: str = DEFAULT_DB_PATH) -> VideoStore:
    """Get or create the global VideoStore singleton.

    Creates the database connection if it doesn't exist.

    Returns:
        The global VideoStore instance
    """
    global _video_store
    if _video_store is None:
        _video_store = VideoStore(db_path)
        await _video_store.connect()
    return _video_store


async def close_video_store() -> None:
    """Close the global VideoStore connection.

    Call this during application shutdown to properly close the database.
    """
    global _video_store
    if _video_store is not None:
        await _video_store.close()
        _video_store = None
