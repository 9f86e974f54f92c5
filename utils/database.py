"""
SQLite database for video metadata and ingestion tracking
"""

import sqlite3
import uuid
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from pathlib import Path

from config.settings import DATABASE_PATH
from utils.logger import setup_logger

logger = setup_logger("database")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Database:
    """SQLite database manager for video records"""

    def __init__(self, db_path: Path = DATABASE_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_database(self):
        """Initialize database with tables"""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                # Videos table
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS videos (
                        id VARCHAR(36) PRIMARY KEY,
                        user_id VARCHAR(36) NOT NULL,
                        title VARCHAR(255) NOT NULL,
                        description TEXT,
                        thumbnail_key TEXT,
                        video_key TEXT,
                        created_at TIMESTAMP,
                        updated_at TIMESTAMP
                    )
                """)

                # One row per finished ingestion attempt
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS ingestion_attempts (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        video_id VARCHAR(36),
                        status VARCHAR(20),
                        last_stage VARCHAR(20),
                        storage_key TEXT,
                        error_message TEXT,
                        start_time TIMESTAMP,
                        end_time TIMESTAMP,
                        duration_seconds FLOAT
                    )
                """)

                conn.commit()
                logger.debug("Database initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

    def create_video(self, user_id: str, title: str,
                     description: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Create a draft video record (no media yet)

        Returns:
            The new record, or None if the insert failed
        """
        record = {
            'id': str(uuid.uuid4()),
            'user_id': str(user_id),
            'title': title,
            'description': description,
            'thumbnail_key': None,
            'video_key': None,
            'created_at': _now(),
            'updated_at': _now()
        }
        try:
            with self._connect() as conn:
                conn.execute("""
                    INSERT INTO videos (
                        id, user_id, title, description,
                        thumbnail_key, video_key, created_at, updated_at
                    ) VALUES (:id, :user_id, :title, :description,
                              :thumbnail_key, :video_key, :created_at, :updated_at)
                """, record)
                conn.commit()
                logger.info(f"Created video: {record['id']}")
                return record

        except Exception as e:
            logger.error(f"Failed to create video: {e}", exc_info=True)
            return None

    def get_video(self, video_id: str) -> Optional[Dict[str, Any]]:
        """Get video by ID"""
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT * FROM videos WHERE id = ?", (str(video_id),)).fetchone()
                return dict(row) if row else None

        except Exception as e:
            logger.error(f"Failed to get video: {e}", exc_info=True)
            return None

    def list_videos(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """List videos, newest first, optionally for one user"""
        try:
            with self._connect() as conn:
                query = "SELECT * FROM videos"
                params = []

                if user_id:
                    query += " WHERE user_id = ?"
                    params.append(str(user_id))

                query += " ORDER BY created_at DESC"
                return [dict(row) for row in conn.execute(query, params).fetchall()]

        except Exception as e:
            logger.error(f"Failed to list videos: {e}", exc_info=True)
            return []

    def update_video(self, record: Dict[str, Any]) -> bool:
        """
        Persist title, description and media keys of an existing record

        Returns:
            True if a row was updated, False otherwise
        """
        try:
            with self._connect() as conn:
                cursor = conn.execute("""
                    UPDATE videos
                    SET title = ?, description = ?, thumbnail_key = ?,
                        video_key = ?, updated_at = ?
                    WHERE id = ?
                """, (
                    record['title'],
                    record.get('description'),
                    record.get('thumbnail_key'),
                    record.get('video_key'),
                    _now(),
                    str(record['id'])
                ))
                conn.commit()

                if cursor.rowcount == 0:
                    logger.warning(f"No video row updated for {record['id']}")
                    return False
                return True

        except Exception as e:
            logger.error(f"Failed to update video: {e}", exc_info=True)
            return False

    def delete_video(self, video_id: str) -> bool:
        """Delete a video record and its ingestion history"""
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM ingestion_attempts WHERE video_id = ?", (str(video_id),))
                cursor = conn.execute("DELETE FROM videos WHERE id = ?", (str(video_id),))
                conn.commit()
                if cursor.rowcount:
                    logger.info(f"Deleted video from database: {video_id}")
                return cursor.rowcount > 0

        except Exception as e:
            logger.error(f"Failed to delete video: {e}", exc_info=True)
            return False

    def log_attempt(self, video_id: str, status: str, last_stage: str,
                    start_time: datetime, end_time: datetime,
                    storage_key: Optional[str] = None,
                    error_message: Optional[str] = None) -> bool:
        """Log the outcome of one ingestion attempt"""
        try:
            with self._connect() as conn:
                conn.execute("""
                    INSERT INTO ingestion_attempts (
                        video_id, status, last_stage, storage_key, error_message,
                        start_time, end_time, duration_seconds
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    str(video_id), status, last_stage, storage_key, error_message,
                    start_time.isoformat(), end_time.isoformat(),
                    (end_time - start_time).total_seconds()
                ))
                conn.commit()
                return True

        except Exception as e:
            logger.error(f"Failed to log ingestion attempt: {e}", exc_info=True)
            return False

    def get_attempts(self, video_id: str) -> List[Dict[str, Any]]:
        """Get all ingestion attempts for a video"""
        try:
            with self._connect() as conn:
                rows = conn.execute("""
                    SELECT * FROM ingestion_attempts
                    WHERE video_id = ?
                    ORDER BY id
                """, (str(video_id),)).fetchall()
                return [dict(row) for row in rows]

        except Exception as e:
            logger.error(f"Failed to get ingestion attempts: {e}", exc_info=True)
            return []
