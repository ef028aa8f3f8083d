import math
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from models.asset_model import MONEY_FIELDS, AssetSnapshot
from utils.normalize import date_sort_key

# (output field, source field)
MIX_FIELDS = (
    ("pct_cash", "net_cash"),
    ("pct_savings", "savings"),
    ("pct_stock", "stock_value"),
    ("pct_fixed", "fixed_asset"),
)

# Liabilities are never part of the allocation view
DISTRIBUTION_FIELDS = (
    ("Cash", "net_cash"),
    ("Savings", "savings"),
    ("Stock", "stock_value"),
    ("Fixed", "fixed_asset"),
)


@dataclass(frozen=True)
class AggregatedPeriod:
    date: Optional[str]
    net_cash: float = 0
    savings: float = 0
    stock_value: float = 0
    fixed_asset: float = 0
    long_loan: float = 0
    total_asset: float = 0
    net_worth: float = 0
    change: float = 0
    change_pct: float = 0
    abs_change: float = 0
    pct_cash: int = 0
    pct_savings: int = 0
    pct_stock: int = 0
    pct_fixed: int = 0

    def to_dict(self):
        return asdict(self)


EMPTY_PERIOD = AggregatedPeriod(date=None)


def _number(v):
    v = float(v)
    return int(v) if v.is_integer() else v


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def filter_view(snapshots: Iterable[AssetSnapshot], view: str = "All") -> List[AssetSnapshot]:
    if view == "All":
        return list(snapshots)
    return [s for s in snapshots if s.owner == view]


def aggregate_periods(snapshots: Iterable[AssetSnapshot], view: str = "All") -> List[AggregatedPeriod]:
    """
    One period per distinct date string within the view, oldest first.

    Money fields are summed across every snapshot of the date, so the "All"
    view folds all owners into a single row. Each period is annotated with
    the net worth change against the period before it and with its asset mix
    in whole percent (each share rounded on its own, so the four need not
    add up to 100).
    """
    selected = filter_view(snapshots, view)
    if not selected:
        return []

    df = pd.DataFrame([s.to_dict() for s in selected], columns=["date", *MONEY_FIELDS])
    sums = df.groupby("date", sort=False)[list(MONEY_FIELDS)].sum()
    sums["sort_key"] = [date_sort_key(d) for d in sums.index]
    sums = sums.sort_values("sort_key", kind="mergesort")

    periods = []
    prev_net_worth = None
    for date, row in sums.iterrows():
        totals = {f: _number(row[f]) for f in MONEY_FIELDS}
        net_worth = totals["net_worth"]

        change = net_worth - prev_net_worth if prev_net_worth is not None else 0
        change_pct = change / prev_net_worth * 100 if prev_net_worth else 0

        mix_total = totals["net_cash"] + totals["savings"] + totals["stock_value"] + totals["fixed_asset"] or 1
        mix = {pct: _round_half_up(totals[src] / mix_total * 100) for pct, src in MIX_FIELDS}

        periods.append(AggregatedPeriod(
            date=date,
            change=change,
            change_pct=change_pct,
            abs_change=abs(change),
            **totals,
            **mix,
        ))
        prev_net_worth = net_worth
    return periods


def latest_and_previous(periods: List[AggregatedPeriod]) -> Tuple[AggregatedPeriod, AggregatedPeriod]:
    latest = periods[-1] if periods else EMPTY_PERIOD
    previous = periods[-2] if len(periods) > 1 else EMPTY_PERIOD
    return latest, previous


def distribution(latest: AggregatedPeriod) -> List[dict]:
    out = []
    for name, field in DISTRIBUTION_FIELDS:
        value = getattr(latest, field)
        if value > 0:
            out.append({"name": name, "value": value})
    return out


def build_dashboard(snapshots: Iterable[AssetSnapshot], view: str = "All") -> dict:
    snapshots = list(snapshots)
    periods = aggregate_periods(snapshots, view)
    latest, previous = latest_and_previous(periods)
    return {
        "view": view,
        "periods": [p.to_dict() for p in periods],
        "latest": latest.to_dict(),
        "previous": previous.to_dict(),
        "delta": latest.net_worth - previous.net_worth,
        "distribution": distribution(latest),
        # newest first, one entry per raw snapshot
        "history": [s.to_dict() for s in reversed(filter_view(snapshots, view))],
    }
