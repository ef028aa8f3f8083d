import logging
from dataclasses import asdict, dataclass
from typing import List, Tuple

from database import COMMENT_TABLE, RowId, SheetNotFound, store
from utils.cache import cache
from utils.normalize import as_text, date_sort_key, resolve_headers

logger = logging.getLogger(__name__)

CACHE_KEY = "comments-data"
CACHE_TAG = "comments"

# The header row of this sheet has been edited by hand over time
COMMENT_HEADERS = {
    "date": ("Date", "date"),
    "owner": ("Owner", "owner"),
    "message": ("Comments", "comments", "Comment", "comment", "Message", "message"),
}


@dataclass(frozen=True)
class CommentEntry:
    row_id: RowId
    date: str
    owner: str
    message: str

    def to_dict(self):
        return asdict(self)


def normalize_comment_rows(rows: List[Tuple[RowId, dict]]) -> List[CommentEntry]:
    """Rows without a date or message are dropped. Newest first."""
    if not rows:
        return []
    columns = resolve_headers(rows[0][1].keys(), COMMENT_HEADERS)

    def cell(raw, field):
        header = columns[field]
        return as_text(raw.get(header)) if header else ""

    out = [
        CommentEntry(row_id=row_id, date=cell(raw, "date"), owner=cell(raw, "owner"), message=cell(raw, "message"))
        for row_id, raw in rows
    ]
    out = [c for c in out if c.date and c.message]
    # reverse=True keeps equal dates in sheet order
    out.sort(key=lambda c: date_sort_key(c.date), reverse=True)
    return out


def _load_comments():
    try:
        rows = store.list_rows(COMMENT_TABLE)
    except SheetNotFound:
        logger.warning("'%s' sheet missing, no comments to show", COMMENT_TABLE)
        return []
    return normalize_comment_rows(rows)


def get_comments() -> List[CommentEntry]:
    return list(cache.get_or_load(CACHE_KEY, _load_comments, tags=(CACHE_TAG,)))


def add_comment(date: str, owner: str, message: str) -> RowId:
    columns = resolve_headers(store.headers(COMMENT_TABLE), COMMENT_HEADERS)
    mapping = {
        columns["date"] or COMMENT_HEADERS["date"][0]: date,
        columns["owner"] or COMMENT_HEADERS["owner"][0]: owner,
        columns["message"] or COMMENT_HEADERS["message"][0]: message,
    }
    try:
        return store.append_row(COMMENT_TABLE, mapping)
    finally:
        cache.invalidate(CACHE_TAG)


def delete_comment(row_id: int) -> bool:
    try:
        return store.delete_row(COMMENT_TABLE, RowId(row_id))
    finally:
        cache.invalidate(CACHE_TAG)
