"""
SQLite Persistence for Monitor Service
======================================

Lightweight persistence layer for:
- Tracked entities (subscriptions + watermarks)
- Price alerts and their one-shot triggered state
- Seen records (delivered dedup keys, append-only)
- Service logs (persistent logging)

Storage: data/monitor.db
"""

import json
import logging
import sqlite3
import threading
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone, timedelta
from pathlib import Path
from queue import Queue, Empty
from typing import Any, Dict, Iterable, List, Optional, Set

from solcerer.models import (
    PriceAlert,
    SourceType,
    TrackedEntity,
    normalize_key,
)

logger = logging.getLogger(__name__)

# Default retention periods
SERVICE_LOG_RETENTION_DAYS = 7

# Database path
DEFAULT_DB_PATH = Path(__file__).parent.parent.parent / "data" / "monitor.db"

# SQLite default limit on bound parameters is 999 on older builds
_IN_CHUNK_SIZE = 500

_SERVICE_LOGS_DDL = """
    CREATE TABLE IF NOT EXISTS service_logs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        level TEXT NOT NULL,
        logger_name TEXT NOT NULL,
        message TEXT NOT NULL,
        exc_info TEXT
    )
"""


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class MonitorDatabase:
    """
    SQLite persistence for the monitor service.

    Designed for minimal overhead:
    - WAL mode for concurrent reads
    - Keyed inserts/updates that are safe to retry
    - Lightweight schema
    """

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        logger.info(f"Database initialized: {self.db_path}")

    @contextmanager
    def _get_connection(self):
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path), timeout=30)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self):
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")

            # Tracked entities: one row per (source type, key, subscriber)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tracked_entities (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    source_type TEXT NOT NULL,
                    entity_key TEXT NOT NULL,
                    subscriber_id TEXT NOT NULL,
                    watermark TEXT,
                    created_at TEXT NOT NULL,
                    UNIQUE (source_type, entity_key, subscriber_id)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_tracked_entities_source
                ON tracked_entities(source_type)
            """)

            # Price alerts: triggered is a one-way flag
            conn.execute("""
                CREATE TABLE IF NOT EXISTS price_alerts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    subscriber_id TEXT NOT NULL,
                    mint TEXT NOT NULL,
                    direction TEXT NOT NULL,
                    threshold REAL NOT NULL,
                    metric TEXT NOT NULL DEFAULT 'market_cap',
                    triggered INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    triggered_at TEXT,
                    UNIQUE (subscriber_id, mint, direction, threshold)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_price_alerts_active
                ON price_alerts(triggered, mint)
            """)

            # Seen records: delivered dedup keys, never deleted
            conn.execute("""
                CREATE TABLE IF NOT EXISTS seen_records (
                    dedup_key TEXT PRIMARY KEY,
                    source_type TEXT NOT NULL,
                    entity_key TEXT NOT NULL,
                    payload TEXT,
                    recorded_at TEXT NOT NULL
                )
            """)

            # Service logs (persists logs to database)
            conn.execute(_SERVICE_LOGS_DDL)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_service_logs_time
                ON service_logs(timestamp)
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_service_logs_level
                ON service_logs(level)
            """)

    # =========================================================================
    # Tracked Entity Operations
    # =========================================================================

    def add_tracked_entity(
        self,
        source_type: SourceType,
        key: str,
        subscriber_id: str,
        watermark: Optional[datetime] = None,
    ) -> bool:
        """
        Register a subscriber for an entity.

        The watermark defaults to the subscription time, so history from
        before the subscription is never delivered.

        Returns:
            True if added, False if the subscriber already tracks this key
        """
        key = normalize_key(source_type, key)
        now = datetime.now(timezone.utc)

        with self._get_connection() as conn:
            cursor = conn.execute("""
                INSERT OR IGNORE INTO tracked_entities (
                    source_type, entity_key, subscriber_id, watermark, created_at
                ) VALUES (?, ?, ?, ?, ?)
            """, (
                source_type.value,
                key,
                subscriber_id,
                _to_iso(watermark or now),
                _to_iso(now),
            ))
            added = cursor.rowcount == 1

        if added:
            logger.debug(f"Tracking {source_type.value}:{key} for {subscriber_id}")
        return added

    def remove_tracked_entity(self, source_type: SourceType, key: str, subscriber_id: str) -> bool:
        """Unregister a subscriber. Returns True if a row was removed."""
        key = normalize_key(source_type, key)
        with self._get_connection() as conn:
            cursor = conn.execute("""
                DELETE FROM tracked_entities
                WHERE source_type = ? AND entity_key = ? AND subscriber_id = ?
            """, (source_type.value, key, subscriber_id))
            return cursor.rowcount > 0

    def get_tracked_entities(self, source_type: SourceType) -> List[TrackedEntity]:
        """
        Load every subscription for a source type, oldest first.

        Args:
            source_type: Which loop the entities belong to

        Returns:
            List of TrackedEntity objects
        """
        with self._get_connection() as conn:
            cursor = conn.execute("""
                SELECT * FROM tracked_entities
                WHERE source_type = ?
                ORDER BY created_at, id
            """, (source_type.value,))
            rows = cursor.fetchall()

        return [
            TrackedEntity(
                source_type=source_type,
                key=row['entity_key'],
                subscriber_id=row['subscriber_id'],
                watermark=_from_iso(row['watermark']),
                created_at=_from_iso(row['created_at']),
            )
            for row in rows
        ]

    def get_watermark(self, source_type: SourceType, key: str) -> Optional[datetime]:
        """Earliest watermark across all subscribers of a key."""
        key = normalize_key(source_type, key)
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT MIN(COALESCE(watermark, created_at)) AS watermark
                FROM tracked_entities
                WHERE source_type = ? AND entity_key = ?
            """, (source_type.value, key)).fetchone()

        return _from_iso(row['watermark']) if row else None

    def set_watermark(
        self,
        source_type: SourceType,
        key: str,
        subscriber_id: str,
        watermark: datetime,
    ) -> bool:
        """Overwrite one subscriber's watermark (subscription management only)."""
        key = normalize_key(source_type, key)
        with self._get_connection() as conn:
            cursor = conn.execute("""
                UPDATE tracked_entities SET watermark = ?
                WHERE source_type = ? AND entity_key = ? AND subscriber_id = ?
            """, (_to_iso(watermark), source_type.value, key, subscriber_id))
            return cursor.rowcount > 0

    # =========================================================================
    # Seen Record Operations
    # =========================================================================

    def seen_keys(self, dedup_keys: Iterable[str]) -> Set[str]:
        """
        Batched existence check.

        Args:
            dedup_keys: Candidate keys

        Returns:
            Subset of keys that already have a seen record
        """
        keys = list(dict.fromkeys(dedup_keys))
        if not keys:
            return set()

        found: Set[str] = set()
        with self._get_connection() as conn:
            for i in range(0, len(keys), _IN_CHUNK_SIZE):
                chunk = keys[i:i + _IN_CHUNK_SIZE]
                placeholders = ", ".join("?" for _ in chunk)
                cursor = conn.execute(
                    f"SELECT dedup_key FROM seen_records WHERE dedup_key IN ({placeholders})",
                    chunk
                )
                found.update(row['dedup_key'] for row in cursor.fetchall())

        return found

    def has_seen(self, dedup_key: str) -> bool:
        """Single-key existence check."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM seen_records WHERE dedup_key = ?", (dedup_key,)
            ).fetchone()
        return row is not None

    def record_seen(
        self,
        dedup_key: str,
        source_type: SourceType,
        entity_key: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Mark a dedup key as delivered.

        Returns:
            True if the record is new, False if it already existed
        """
        now = datetime.now(timezone.utc).isoformat()
        with self._get_connection() as conn:
            cursor = conn.execute("""
                INSERT OR IGNORE INTO seen_records (
                    dedup_key, source_type, entity_key, payload, recorded_at
                ) VALUES (?, ?, ?, ?, ?)
            """, (
                dedup_key,
                source_type.value,
                entity_key,
                json.dumps(payload, default=str) if payload is not None else None,
                now,
            ))
            return cursor.rowcount == 1

    def get_recent_seen(self, hours: int = 24, source_type: Optional[SourceType] = None) -> List[dict]:
        """Seen records from the last N hours, newest first."""
        cutoff = (datetime.now(timezone.utc) - timedelta(hours=hours)).isoformat()
        query = "SELECT * FROM seen_records WHERE recorded_at > ?"
        params: list = [cutoff]
        if source_type is not None:
            query += " AND source_type = ?"
            params.append(source_type.value)
        query += " ORDER BY recorded_at DESC"

        with self._get_connection() as conn:
            cursor = conn.execute(query, params)
            records = []
            for row in cursor.fetchall():
                record = dict(row)
                if record.get('payload'):
                    record['payload'] = json.loads(record['payload'])
                records.append(record)
            return records

    # =========================================================================
    # Price Alert Operations
    # =========================================================================

    def add_price_alert(
        self,
        subscriber_id: str,
        mint: str,
        direction: str,
        threshold: float,
        metric: str = "market_cap",
    ) -> Optional[int]:
        """
        Register a price alert.

        Returns:
            The alert id, or None if an identical alert already exists
        """
        now = datetime.now(timezone.utc).isoformat()
        with self._get_connection() as conn:
            cursor = conn.execute("""
                INSERT OR IGNORE INTO price_alerts (
                    subscriber_id, mint, direction, threshold, metric, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
            """, (subscriber_id, mint, direction, threshold, metric, now))
            if cursor.rowcount != 1:
                return None
            return cursor.lastrowid

    def remove_price_alert(self, alert_id: int, subscriber_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM price_alerts WHERE id = ? AND subscriber_id = ?",
                (alert_id, subscriber_id)
            )
            return cursor.rowcount > 0

    def get_active_price_alerts(self) -> List[PriceAlert]:
        """Load all alerts that have not tripped yet."""
        with self._get_connection() as conn:
            cursor = conn.execute("""
                SELECT * FROM price_alerts
                WHERE triggered = 0
                ORDER BY id
            """)
            rows = cursor.fetchall()

        return [
            PriceAlert(
                alert_id=row['id'],
                subscriber_id=row['subscriber_id'],
                mint=row['mint'],
                direction=row['direction'],
                threshold=row['threshold'],
                metric=row['metric'],
                triggered=bool(row['triggered']),
                created_at=_from_iso(row['created_at']),
            )
            for row in rows
        ]

    def is_tripped(self, alert_id: int) -> bool:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT triggered FROM price_alerts WHERE id = ?", (alert_id,)
            ).fetchone()
        return bool(row['triggered']) if row else False

    def trip(self, alert_id: int) -> bool:
        """
        Flip an alert to triggered.

        Returns:
            True if this call tripped it, False if it was already tripped
            (or no longer exists)
        """
        now = datetime.now(timezone.utc).isoformat()
        with self._get_connection() as conn:
            cursor = conn.execute("""
                UPDATE price_alerts SET triggered = 1, triggered_at = ?
                WHERE id = ? AND triggered = 0
            """, (now, alert_id))
            return cursor.rowcount == 1

    # =========================================================================
    # Service Log Operations
    # =========================================================================

    def get_logs(
        self,
        hours: int = 24,
        level: Optional[str] = None,
        limit: int = 1000
    ) -> List[dict]:
        """
        Get recent logs from the database.

        Args:
            hours: How many hours of logs to fetch
            level: Filter by log level (optional)
            limit: Maximum number of logs to return

        Returns:
            List of log records (newest first)
        """
        cutoff = (datetime.now(timezone.utc) - timedelta(hours=hours)).isoformat()

        with self._get_connection() as conn:
            if level:
                cursor = conn.execute("""
                    SELECT * FROM service_logs
                    WHERE timestamp > ? AND level = ?
                    ORDER BY timestamp DESC
                    LIMIT ?
                """, (cutoff, level, limit))
            else:
                cursor = conn.execute("""
                    SELECT * FROM service_logs
                    WHERE timestamp > ?
                    ORDER BY timestamp DESC
                    LIMIT ?
                """, (cutoff, limit))

            return [dict(row) for row in cursor.fetchall()]

    def prune_logs(self, days: int = SERVICE_LOG_RETENTION_DAYS) -> int:
        """
        Remove old log entries.

        Args:
            days: Days of logs to keep

        Returns:
            Number of rows deleted
        """
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()

        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM service_logs WHERE timestamp < ?", (cutoff,)
            )
            return cursor.rowcount

    # =========================================================================
    # Maintenance Operations
    # =========================================================================

    def vacuum(self):
        """Reclaim space after large deletes."""
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute("VACUUM")

    def get_stats(self) -> dict:
        """Row counts per table plus file size."""
        stats = {}
        with self._get_connection() as conn:
            for table in ('tracked_entities', 'price_alerts', 'seen_records', 'service_logs'):
                stats[table] = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            stats['price_alerts_active'] = conn.execute(
                "SELECT COUNT(*) FROM price_alerts WHERE triggered = 0"
            ).fetchone()[0]

        stats['file_size_mb'] = self.db_path.stat().st_size / (1024 * 1024) if self.db_path.exists() else 0
        return stats


class SQLiteLoggingHandler(logging.Handler):
    """
    A logging handler that writes log records to SQLite database.

    Uses a background thread to batch writes and avoid blocking the event loop.
    """

    def __init__(
        self,
        db_path: Path = DEFAULT_DB_PATH,
        batch_size: int = 50,
        flush_interval: float = 5.0,
        level: int = logging.INFO
    ):
        """
        Initialize the SQLite logging handler.

        Args:
            db_path: Path to SQLite database file
            batch_size: Number of logs to batch before writing
            flush_interval: Max seconds between flushes
            level: Minimum log level to capture
        """
        super().__init__(level)
        self.db_path = Path(db_path)
        self.batch_size = batch_size
        self.flush_interval = flush_interval

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(str(self.db_path), timeout=30) as conn:
            conn.execute(_SERVICE_LOGS_DDL)

        self._queue: Queue = Queue()
        self._shutdown = threading.Event()

        self._writer_thread = threading.Thread(
            target=self._writer_loop,
            daemon=True,
            name="SQLiteLogWriter"
        )
        self._writer_thread.start()

    def emit(self, record: logging.LogRecord):
        """
        Emit a log record by adding it to the queue.

        Args:
            record: Log record to emit
        """
        try:
            exc_info = None
            if record.exc_info:
                exc_info = ''.join(traceback.format_exception(*record.exc_info))

            log_entry = {
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'level': record.levelname,
                'logger_name': record.name,
                'message': self.format(record),
                'exc_info': exc_info,
            }
            self._queue.put(log_entry)
        except Exception:
            self.handleError(record)

    def _writer_loop(self):
        """Background loop that batches and writes logs to SQLite."""
        batch = []

        while not self._shutdown.is_set():
            try:
                while len(batch) < self.batch_size:
                    try:
                        log_entry = self._queue.get(timeout=self.flush_interval)
                        batch.append(log_entry)
                    except Empty:
                        break

                if batch:
                    self._write_batch(batch)
                    batch = []

            except Exception:
                import sys
                traceback.print_exc(file=sys.stderr)
                batch = []

        # Drain remaining queue on shutdown
        while not self._queue.empty():
            try:
                batch.append(self._queue.get_nowait())
            except Empty:
                break

        if batch:
            self._write_batch(batch)

    def _write_batch(self, batch: List[dict]):
        """Write a batch of logs to the database."""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=30)
            try:
                conn.executemany("""
                    INSERT INTO service_logs (timestamp, level, logger_name, message, exc_info)
                    VALUES (?, ?, ?, ?, ?)
                """, [
                    (log['timestamp'], log['level'], log['logger_name'],
                     log['message'], log.get('exc_info'))
                    for log in batch
                ])
                conn.commit()
            finally:
                conn.close()
        except Exception:
            import sys
            traceback.print_exc(file=sys.stderr)

    def close(self):
        """Close the handler and flush remaining logs."""
        self._shutdown.set()
        if self._writer_thread.is_alive():
            self._writer_thread.join(timeout=10)
        super().close()
