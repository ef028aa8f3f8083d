# database.py
import logging
import os
import tempfile
import threading
import zipfile
from pathlib import Path
from typing import Dict, List, NewType, Optional, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

RowId = NewType("RowId", int)

ASSET_TABLE = "DB"
COMMENT_TABLE = "Comments"

DEFAULT_HEADERS = {
    ASSET_TABLE: [
        "date", "owner", "net_cash", "savings", "stock_krw",
        "fixed_asset", "long_loan", "total_asset", "net_worth", "memo",
    ],
    COMMENT_TABLE: ["Date", "Owner", "Comments"],
}

# Row 1 holds the headers
FIRST_DATA_ROW = 2


class StoreError(Exception):
    pass


class SheetNotFound(StoreError):
    pass


def _is_blank(values) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in values)


def _header_values(ws) -> List[str]:
    row = next(ws.iter_rows(min_row=1, max_row=1, values_only=True), ())
    return [str(v).strip() if v is not None else "" for v in row]


class SheetStore:
    """
    Row store over an .xlsx workbook. Each table is a worksheet whose first
    row is the header; row ids are worksheet row numbers.

    Row ids are positional: deleting a row renumbers every row below it, so
    an id read before another delete may now point at a different record.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()

    def init_app(self, app):
        self.path = Path(app.config["SHEET_PATH"])

    def _open(self, read_only: bool = False):
        if self.path is None:
            raise StoreError("sheet store is not configured")
        try:
            # write paths keep formulas, read paths see cached values
            return load_workbook(self.path, read_only=read_only, data_only=read_only)
        except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError) as e:
            raise StoreError(f"cannot open workbook {self.path}: {e}") from e

    def _save(self, wb):
        # write beside the target and swap it in, readers never see a partial file
        try:
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.stem}-", suffix=".xlsx")
            os.close(fd)
        except OSError as e:
            raise StoreError(f"cannot save workbook {self.path}: {e}") from e
        try:
            wb.save(tmp)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreError(f"cannot save workbook {self.path}: {e}") from e
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)

    @staticmethod
    def _sheet(wb, table: str):
        if table not in wb.sheetnames:
            raise SheetNotFound(f"Sheet '{table}' not found")
        return wb[table]

    def headers(self, table: str) -> List[str]:
        wb = self._open(read_only=True)
        try:
            return _header_values(self._sheet(wb, table))
        finally:
            wb.close()

    def list_rows(self, table: str) -> List[Tuple[RowId, Dict[str, object]]]:
        wb = self._open(read_only=True)
        try:
            ws = self._sheet(wb, table)
            headers = _header_values(ws)
            rows = []
            for row_number, values in enumerate(
                ws.iter_rows(min_row=FIRST_DATA_ROW, values_only=True), start=FIRST_DATA_ROW
            ):
                if _is_blank(values):
                    continue
                values = list(values) + [None] * (len(headers) - len(values))
                rows.append((RowId(row_number), {h: v for h, v in zip(headers, values) if h}))
            return rows
        finally:
            wb.close()

    def append_row(self, table: str, mapping: Dict[str, object]) -> RowId:
        with self._lock:
            wb = self._open()
            ws = self._sheet(wb, table)
            headers = _header_values(ws)
            ws.append([mapping.get(h) if h else None for h in headers])
            row_id = RowId(ws.max_row)
            self._save(wb)
        logger.info("appended row %s to %s", row_id, table)
        return row_id

    def delete_row(self, table: str, row_id: RowId) -> bool:
        with self._lock:
            wb = self._open()
            ws = self._sheet(wb, table)
            if not FIRST_DATA_ROW <= row_id <= ws.max_row:
                return False
            values = next(ws.iter_rows(min_row=row_id, max_row=row_id, values_only=True))
            if _is_blank(values):
                return False
            ws.delete_rows(row_id)
            self._save(wb)
        logger.info("deleted row %s from %s", row_id, table)
        return True


store = SheetStore()


def init_db(app):
    store.init_app(app)
    path = store.path
    logger.info("Opening workbook: %s", path)

    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        wb = Workbook()
        wb.remove(wb.active)
        logger.info("Workbook not found, creating %s", path)
    else:
        try:
            wb = store._open()
        except StoreError as e:
            logger.error("Workbook could not be opened: %s", e)
            return  # stop setup, requests will surface the store error

    # Create any missing sheet with its default header row
    created = []
    for table, headers in DEFAULT_HEADERS.items():
        if table not in wb.sheetnames:
            ws = wb.create_sheet(table)
            ws.append(headers)
            created.append(table)

    if created:
        try:
            store._save(wb)
        except StoreError as e:
            logger.error("Workbook could not be saved: %s", e)
            return
        logger.info("Created sheets: %s", ", ".join(created))
    logger.info("Workbook ready")
