import math
import re
from datetime import date, datetime, timezone
from typing import Dict, Iterable, Optional, Sequence

# Currency symbols, thousands separators and whitespace
_MONEY_NOISE = re.compile(r"[₩$€£¥,\s]")
# Leading numeric prefix, "12.5abc" -> "12.5"
_NUMBER_PREFIX = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")

_EPOCH = datetime(1970, 1, 1)


def parse_money(value):
    """
    Normalize a monetary cell to a number. Never raises: missing, blank and
    unparseable values all become 0.
    """
    if not value or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return 0 if isinstance(value, float) and math.isnan(value) else value
    clean = _MONEY_NOISE.sub("", str(value))
    m = _NUMBER_PREFIX.match(clean)
    if not m:
        return 0
    parsed = float(m.group(0))
    if math.isnan(parsed) or math.isinf(parsed):
        return 0
    return int(parsed) if parsed.is_integer() else parsed


def as_text(value) -> str:
    """Cell value as a trimmed string. Date cells become YYYY-MM-DD."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def resolve_headers(headers: Iterable[str], aliases: Dict[str, Sequence[str]]) -> Dict[str, Optional[str]]:
    """
    Map each logical field to the sheet header that carries it. Aliases are
    tried in order; the first one present in ``headers`` wins.
    """
    present = set(headers)
    resolved = {}
    for field, candidates in aliases.items():
        resolved[field] = next((c for c in candidates if c in present), None)
    return resolved


def parse_date(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def date_sort_key(value: str) -> float:
    """Seconds since the epoch; unparseable dates sort first."""
    dt = parse_date(value)
    if dt is None:
        return float("-inf")
    return (dt - _EPOCH).total_seconds()
