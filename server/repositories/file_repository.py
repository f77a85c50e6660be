"""File repository: durable id -> FileRecord mapping."""

import sqlite3
from collections import OrderedDict
from datetime import datetime
from typing import Iterable, List, Optional

from common.logging_config import get_logger
from server.database import get_db_connection, write_transaction
from server.domain import FileRecord

logger = get_logger(__name__)

_SELECT_RECORDS = """
    SELECT f.file_id, f.name, f.owner_id, f.size, f.type, f.created_at, s.principal_id
    FROM files f
    LEFT JOIN file_shares s ON s.file_id = f.file_id
"""


def _records_from_rows(rows: Iterable[sqlite3.Row]) -> List[FileRecord]:
    grouped = OrderedDict()
    for row in rows:
        entry = grouped.get(row["file_id"])
        if entry is None:
            entry = grouped[row["file_id"]] = (row, set())
        if row["principal_id"] is not None:
            entry[1].add(row["principal_id"])

    return [
        FileRecord(
            file_id=row["file_id"],
            owner_id=row["owner_id"],
            size=row["size"],
            type=row["type"],
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
            shared_to=frozenset(shares),
        )
        for row, shares in grouped.values()
    ]


class FileRepository:
    """
    Metadata store for file records.

    Methods taking `conn` run on the caller's connection and leave the
    transaction to the caller; without one they open a connection and
    commit before returning.
    """

    @staticmethod
    def get(file_id: str, conn=None) -> Optional[FileRecord]:
        query = _SELECT_RECORDS + " WHERE f.file_id = ? ORDER BY s.principal_id"
        if conn is not None:
            rows = conn.execute(query, (file_id,)).fetchall()
        else:
            with get_db_connection() as conn:
                rows = conn.execute(query, (file_id,)).fetchall()

        records = _records_from_rows(rows)
        return records[0] if records else None

    @staticmethod
    def insert(record: FileRecord, conn=None) -> FileRecord:
        """
        Insert a new record.

        Raises:
            sqlite3.IntegrityError: If a record with this file_id exists
        """
        if conn is None:
            with get_db_connection() as conn, write_transaction(conn):
                return FileRepository.insert(record, conn=conn)

        conn.execute(
            """
            INSERT INTO files (file_id, name, owner_id, size, type, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (record.file_id, record.name, record.owner_id, record.size,
             record.type, record.created_at.isoformat())
        )
        FileRepository._write_shares(conn, record.file_id, record.shared_to)
        logger.debug(f"Inserted file record [file_id={record.file_id}] [owner_id={record.owner_id}]")
        return record

    @staticmethod
    def put(record: FileRecord, conn=None) -> FileRecord:
        """
        Upsert a record, replacing owner and share set wholesale.
        """
        if conn is None:
            with get_db_connection() as conn, write_transaction(conn):
                return FileRepository.put(record, conn=conn)

        conn.execute(
            """
            INSERT INTO files (file_id, name, owner_id, size, type, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(file_id) DO UPDATE SET owner_id = excluded.owner_id
            """,
            (record.file_id, record.name, record.owner_id, record.size,
             record.type, record.created_at.isoformat())
        )
        conn.execute("DELETE FROM file_shares WHERE file_id = ?", (record.file_id,))
        FileRepository._write_shares(conn, record.file_id, record.shared_to)
        logger.debug(
            f"Stored file record [file_id={record.file_id}] [owner_id={record.owner_id}] "
            f"[shares={len(record.shared_to)}]"
        )
        return record

    @staticmethod
    def delete(file_id: str, conn=None) -> bool:
        """
        Delete a record and its shares.

        Returns:
            True if a record was removed, False if none existed
        """
        if conn is None:
            with get_db_connection() as conn, write_transaction(conn):
                return FileRepository.delete(file_id, conn=conn)

        cursor = conn.execute("DELETE FROM files WHERE file_id = ?", (file_id,))
        removed = cursor.rowcount > 0
        logger.debug(f"Deleted file record [file_id={file_id}] removed={removed}")
        return removed

    @staticmethod
    def exists(file_id: str, conn=None) -> bool:
        query = "SELECT 1 FROM files WHERE file_id = ?"
        if conn is not None:
            return conn.execute(query, (file_id,)).fetchone() is not None
        with get_db_connection() as conn:
            return conn.execute(query, (file_id,)).fetchone() is not None

    @staticmethod
    def list_all() -> List[FileRecord]:
        """
        All records, read in a single statement so the result is one snapshot.
        """
        with get_db_connection() as conn:
            rows = conn.execute(
                _SELECT_RECORDS + " ORDER BY f.created_at, f.file_id, s.principal_id"
            ).fetchall()
        return _records_from_rows(rows)

    @staticmethod
    def list_ids() -> List[str]:
        with get_db_connection() as conn:
            rows = conn.execute("SELECT file_id FROM files ORDER BY file_id").fetchall()
        return [row["file_id"] for row in rows]

    @staticmethod
    def list_visible_to(principal_id: str) -> List[FileRecord]:
        """
        Records owned by or shared with principal_id.
        """
        with get_db_connection() as conn:
            rows = conn.execute(
                _SELECT_RECORDS
                + """
                WHERE f.owner_id = ?
                   OR f.file_id IN (SELECT file_id FROM file_shares WHERE principal_id = ?)
                ORDER BY f.created_at, f.file_id, s.principal_id
                """,
                (principal_id, principal_id)
            ).fetchall()
        return _records_from_rows(rows)

    @staticmethod
    def _write_shares(conn, file_id: str, principal_ids: Iterable[str]) -> None:
        conn.executemany(
            "INSERT INTO file_shares (file_id, principal_id) VALUES (?, ?)",
            [(file_id, principal_id) for principal_id in sorted(principal_ids)]
        )
