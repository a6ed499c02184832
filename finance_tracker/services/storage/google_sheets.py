"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the hosted backend because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions across tables (cascades delete children first)
- Limited query capabilities (we filter in Python)

Each table is one worksheet whose first row holds the column names.
Values are written as text; empty cells read back as None and the
Pydantic models parse them on the way out of the repositories.
"""

from typing import Any, Optional
from uuid import uuid4

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from finance_tracker.config import GoogleSheetsSettings, get_settings
from finance_tracker.services.storage.changes import ChangeAction, ChangeFeed
from finance_tracker.services.storage.interface import (
    BANKS,
    CATEGORIES,
    GOAL_DEPOSITS,
    SAVINGS_GOALS,
    SPENDING_GOALS,
    TRANSACTIONS,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    Row,
    StorageError,
    TableStoreInterface,
)


# Column layout of every worksheet
TABLE_COLUMNS: dict[str, list[str]] = {
    TRANSACTIONS: [
        "id",
        "user_id",
        "description",
        "amount",
        "type",
        "category",
        "date",
        "bank_id",
        "created_at",
    ],
    BANKS: [
        "id",
        "user_id",
        "name",
        "initial_balance",
        "color",
        "icon",
        "created_at",
        "updated_at",
    ],
    CATEGORIES: [
        "id",
        "user_id",
        "name",
        "type",
        "icon",
        "created_at",
    ],
    SPENDING_GOALS: [
        "id",
        "user_id",
        "category",
        "limit",
        "month",
        "created_at",
    ],
    SAVINGS_GOALS: [
        "id",
        "user_id",
        "name",
        "description",
        "target_amount",
        "created_at",
    ],
    GOAL_DEPOSITS: [
        "id",
        "user_id",
        "goal_id",
        "amount",
        "description",
        "date",
        "created_at",
    ],
}


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, table: str) -> gspread.Worksheet:
        """Get or create the worksheet backing a table."""
        columns = TABLE_COLUMNS[table]
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(table)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=table,
                rows=self._settings.worksheet_rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet


class GoogleSheetsTableStore(TableStoreInterface):
    """
    Google Sheets implementation of the table store.

    One row per entity. Row numbers are 1-based and row 1 is the header.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        changes: Optional[ChangeFeed] = None,
    ):
        super().__init__(changes)
        self._client = client or GoogleSheetsClient()

    def _columns(self, table: str) -> list[str]:
        self._check_table(table)
        return TABLE_COLUMNS[table]

    def _to_sheet_row(self, table: str, row: Row) -> list[str]:
        """Convert a row dict to cell values in column order."""
        values = []
        for column in self._columns(table):
            value = row.get(column)
            values.append("" if value is None else str(value))
        return values

    def _from_sheet_row(self, table: str, cells: list[str]) -> Row:
        """Convert cell values back to a row dict."""
        row: Row = {}
        for index, column in enumerate(self._columns(table)):
            try:
                value = cells[index]
            except IndexError:
                value = ""
            row[column] = value if value != "" else None
        return row

    def _read_rows(self, table: str) -> list[tuple[int, Row]]:
        """Read (sheet_row_number, row) pairs, skipping blank rows."""
        sheet = self._client.get_worksheet(table)
        all_rows = sheet.get_all_values()[1:]  # Skip header
        rows = []
        for number, cells in enumerate(all_rows, start=2):
            if not cells or not cells[0]:
                continue
            rows.append((number, self._from_sheet_row(table, cells)))
        return rows

    @staticmethod
    def _as_cells(filters: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
        # Sheets hand back text, so compare against the text form
        if not filters:
            return filters
        return {k: (None if v is None else str(v)) for k, v in filters.items()}

    async def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        """Select rows from a worksheet."""
        self._check_table(table)
        try:
            cell_filters = self._as_cells(filters)
            rows = [
                row for _, row in self._read_rows(table)
                if self._matches(row, cell_filters)
            ]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {table}: {e}")
        return self._sorted(rows, order_by, descending)

    async def insert(self, table: str, row: Row) -> Row:
        """Append a row to a worksheet."""
        self._check_table(table)
        new_row = dict(row)
        new_row.setdefault("id", str(uuid4()))
        try:
            existing_ids = {r["id"] for _, r in self._read_rows(table)}
            if new_row["id"] in existing_ids:
                raise DuplicateError(f"{table} row already exists: {new_row['id']}")
            sheet = self._client.get_worksheet(table)
            sheet.append_row(self._to_sheet_row(table, new_row), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to insert into {table}: {e}")

        await self._notify(table, {new_row.get("user_id")}, ChangeAction.INSERT)
        return new_row

    async def update(self, table: str, row_id: str, patch: Row) -> Row:
        """Rewrite one row in place."""
        self._check_table(table)
        try:
            for number, existing in self._read_rows(table):
                if existing["id"] == row_id:
                    updated = {**existing, **patch, "id": row_id}
                    sheet = self._client.get_worksheet(table)
                    sheet.update(
                        values=[self._to_sheet_row(table, updated)],
                        range_name=f"A{number}",
                        value_input_option="RAW",
                    )
                    break
            else:
                raise NotFoundError(f"{table} row not found: {row_id}")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {table}: {e}")

        await self._notify(
            table,
            {existing.get("user_id"), updated.get("user_id")},
            ChangeAction.UPDATE,
        )
        return updated

    async def delete(self, table: str, row_id: str) -> bool:
        """Delete a row by id."""
        self._check_table(table)
        try:
            for number, existing in self._read_rows(table):
                if existing["id"] == row_id:
                    self._client.get_worksheet(table).delete_rows(number)
                    break
            else:
                return False
        except Exception as e:
            raise StorageError(f"Failed to delete from {table}: {e}")

        await self._notify(table, {existing.get("user_id")}, ChangeAction.DELETE)
        return True

    async def delete_where(self, table: str, filters: dict[str, Any]) -> int:
        """Delete every matching row, bottom-up so row numbers stay valid."""
        self._check_table(table)
        if not filters:
            raise StorageError("delete_where requires at least one filter")

        try:
            cell_filters = self._as_cells(filters)
            doomed = [
                (number, row) for number, row in self._read_rows(table)
                if self._matches(row, cell_filters)
            ]
            sheet = self._client.get_worksheet(table)
            for number, _ in sorted(doomed, key=lambda pair: pair[0], reverse=True):
                sheet.delete_rows(number)
        except Exception as e:
            raise StorageError(f"Failed to delete from {table}: {e}")

        if doomed:
            await self._notify(
                table,
                {row.get("user_id") for _, row in doomed},
                ChangeAction.DELETE,
            )
        return len(doomed)
