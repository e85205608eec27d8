"""SQLite database operations for Splitly."""

import sqlite3
from datetime import datetime
from pathlib import Path

from .models import Expense, Friend


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        # Friends table
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS friends (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        # Expenses table
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expenses (
                id TEXT PRIMARY KEY,
                description TEXT NOT NULL,
                amount_cents INTEGER NOT NULL,
                paid_by TEXT NOT NULL,
                split_type TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        # One row per participant or split key, position keeps their order.
        # amount_cents is NULL for a participant without a split entry.
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expense_splits (
                expense_id TEXT NOT NULL,
                participant_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                amount_cents INTEGER,
                is_participant INTEGER NOT NULL DEFAULT 1,
                PRIMARY KEY (expense_id, participant_id)
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Friend operations
    # ========================================================================

    def save_friend(self, friend: Friend):
        """Insert or rename a friend."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO friends (id, name, created_at)
            VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET name = excluded.name
            """,
            (friend.id, friend.name, friend.created_at.isoformat()),
        )
        self.conn.commit()

    def get_friend(self, friend_id: str) -> Friend | None:
        """Get a friend by ID."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, created_at FROM friends WHERE id = ?", (friend_id,)
        )
        row = cursor.fetchone()
        if not row:
            return None

        return Friend(
            id=row["id"],
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def get_friends(self) -> list[Friend]:
        """Get all friends in the order they were added."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, created_at FROM friends ORDER BY created_at, rowid"
        )
        return [
            Friend(
                id=row["id"],
                name=row["name"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in cursor.fetchall()
        ]

    # ========================================================================
    # Expense operations
    # ========================================================================

    def save_expense(self, expense: Expense):
        """Insert or replace an expense together with its splits."""
        with self.conn:
            self._write_expense(self.conn.cursor(), expense)

    def remove_friend(self, friend_id: str, updated_expenses: list[Expense]):
        """
        Delete a friend and save the expenses rewritten without them.

        Runs as one transaction: either every expense is rewritten and the
        friend deleted, or nothing changes.
        """
        with self.conn:
            cursor = self.conn.cursor()
            for expense in updated_expenses:
                self._write_expense(cursor, expense)
            cursor.execute("DELETE FROM friends WHERE id = ?", (friend_id,))

    def _write_expense(self, cursor: sqlite3.Cursor, expense: Expense):
        """Write an expense and its split rows without committing."""
        cursor.execute(
            """
            INSERT INTO expenses (
                id, description, amount_cents, paid_by, split_type, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                description = excluded.description,
                amount_cents = excluded.amount_cents,
                paid_by = excluded.paid_by,
                split_type = excluded.split_type,
                created_at = excluded.created_at
            """,
            (
                expense.id,
                expense.description,
                expense.amount_cents,
                expense.paid_by,
                expense.split_type,
                expense.created_at.isoformat(),
            ),
        )

        # Participants first in their order, then split keys outside them
        participant_ids = list(expense.participants)
        participant_ids += [pid for pid in expense.splits if pid not in participant_ids]
        participants = set(expense.participants)

        cursor.execute("DELETE FROM expense_splits WHERE expense_id = ?", (expense.id,))
        cursor.executemany(
            """
            INSERT INTO expense_splits (
                expense_id, participant_id, position, amount_cents, is_participant
            ) VALUES (?, ?, ?, ?, ?)
            """,
            [
                (
                    expense.id,
                    participant_id,
                    position,
                    expense.splits.get(participant_id),
                    1 if participant_id in participants else 0,
                )
                for position, participant_id in enumerate(participant_ids)
            ],
        )

    def get_expense(self, expense_id: str) -> Expense | None:
        """Get an expense by ID."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, description, amount_cents, paid_by, split_type, created_at
            FROM expenses
            WHERE id = ?
            """,
            (expense_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None

        return self._expense_from_row(row)

    def get_expenses(self) -> list[Expense]:
        """Get all expenses, newest first."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, description, amount_cents, paid_by, split_type, created_at
            FROM expenses
            ORDER BY created_at DESC, rowid DESC
            """
        )
        return [self._expense_from_row(row) for row in cursor.fetchall()]

    def delete_expense(self, expense_id: str) -> bool:
        """Delete an expense and its splits. Returns False if it didn't exist."""
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM expense_splits WHERE expense_id = ?", (expense_id,))
        cursor.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    def _get_splits(self, expense_id: str) -> list[sqlite3.Row]:
        """Get split rows for an expense in stored order."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT participant_id, amount_cents, is_participant
            FROM expense_splits
            WHERE expense_id = ?
            ORDER BY position
            """,
            (expense_id,),
        )
        return cursor.fetchall()

    def _expense_from_row(self, row: sqlite3.Row) -> Expense:
        """Build an Expense from an expenses row plus its split rows."""
        split_rows = self._get_splits(row["id"])
        return Expense(
            id=row["id"],
            description=row["description"],
            amount_cents=row["amount_cents"],
            paid_by=row["paid_by"],
            split_type=row["split_type"],
            participants=[
                split["participant_id"]
                for split in split_rows
                if split["is_participant"]
            ],
            splits={
                split["participant_id"]: split["amount_cents"]
                for split in split_rows
                if split["amount_cents"] is not None
            },
            created_at=datetime.fromisoformat(row["created_at"]),
        )
