import logging
from dataclasses import asdict, dataclass
from typing import Iterable, List, Tuple

from database import ASSET_TABLE, RowId, store
from utils.cache import cache
from utils.normalize import as_text, date_sort_key, parse_money, resolve_headers

logger = logging.getLogger(__name__)

CACHE_KEY = "assets-data"
CACHE_TAG = "assets"

MONEY_FIELDS = (
    "net_cash", "savings", "stock_value", "fixed_asset",
    "long_loan", "total_asset", "net_worth",
)

# Accepted sheet headers per field, in order of preference
ASSET_HEADERS = {
    "date": ("date", "Date"),
    "owner": ("owner", "Owner"),
    "net_cash": ("net_cash", "Net Cash"),
    "savings": ("savings", "Savings"),
    "stock_value": ("stock_krw", "stock_value", "Stock"),
    "fixed_asset": ("fixed_asset", "Fixed Asset"),
    "long_loan": ("long_loan", "Long Loan"),
    "total_asset": ("total_asset", "Total Asset"),
    "net_worth": ("net_worth", "Net Worth"),
    "memo": ("memo", "Memo"),
}


@dataclass(frozen=True)
class AssetSnapshot:
    row_id: RowId
    date: str
    owner: str
    net_cash: float = 0
    savings: float = 0
    stock_value: float = 0
    fixed_asset: float = 0
    long_loan: float = 0
    total_asset: float = 0
    net_worth: float = 0
    memo: str = ""

    def to_dict(self):
        return asdict(self)


def normalize_asset_rows(rows: List[Tuple[RowId, dict]]) -> List[AssetSnapshot]:
    """
    Turn raw sheet rows into snapshots, oldest first. Rows without a date are
    dropped; rows sharing a date keep their sheet order.
    """
    if not rows:
        return []
    columns = resolve_headers(rows[0][1].keys(), ASSET_HEADERS)

    def cell(raw, field):
        header = columns[field]
        return raw.get(header) if header else None

    out = []
    for row_id, raw in rows:
        date = as_text(cell(raw, "date"))
        if not date:
            continue
        out.append(AssetSnapshot(
            row_id=row_id,
            date=date,
            owner=as_text(cell(raw, "owner")),
            memo=as_text(cell(raw, "memo")),
            **{f: parse_money(cell(raw, f)) for f in MONEY_FIELDS},
        ))

    dropped = len(rows) - len(out)
    if dropped:
        logger.debug("skipped %d asset rows without a date", dropped)
    out.sort(key=lambda s: date_sort_key(s.date))
    return out


def _load_assets():
    return normalize_asset_rows(store.list_rows(ASSET_TABLE))


def get_assets() -> List[AssetSnapshot]:
    """All snapshots, oldest first. Served from cache for up to an hour."""
    return list(cache.get_or_load(CACHE_KEY, _load_assets, tags=(CACHE_TAG,)))


def add_asset(row: dict) -> RowId:
    """
    Append an already validated snapshot. Keys are mapped onto the sheet's
    own header spelling; fields the sheet has no column for are dropped.
    """
    columns = resolve_headers(store.headers(ASSET_TABLE), ASSET_HEADERS)
    mapping = {}
    for field, value in row.items():
        header = columns.get(field) or ASSET_HEADERS[field][0]
        mapping[header] = value
    try:
        return store.append_row(ASSET_TABLE, mapping)
    finally:
        cache.invalidate(CACHE_TAG)


def delete_assets(row_ids: Iterable[int]) -> List[RowId]:
    """
    Delete snapshots by row id. Ids are processed highest first so each
    deletion leaves the positions of the remaining targets untouched.
    Missing rows are skipped.
    """
    deleted = []
    try:
        for row_id in sorted(set(row_ids), reverse=True):
            if store.delete_row(ASSET_TABLE, RowId(row_id)):
                deleted.append(RowId(row_id))
    finally:
        cache.invalidate(CACHE_TAG)
    return deleted
