import math
from datetime import datetime

OWNERS = ("Husband", "Wife", "Joint")
VIEWS = ("All",) + OWNERS

ASSET_AMOUNT_FIELDS = ("net_cash", "savings", "stock_value", "fixed_asset", "long_loan")


class MissingFieldError(ValueError):
    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__("missing required fields: " + ", ".join(self.fields))


def _text(val) -> str:
    return val.strip() if isinstance(val, str) else ""


def require_fields(data: dict, fields):
    missing = [f for f in fields if not _text(data.get(f))]
    if missing:
        raise MissingFieldError(missing)


def validate_owner(owner: str):
    if owner not in OWNERS:
        raise ValueError("invalid owner")


def validate_view(view: str):
    if view not in VIEWS:
        raise ValueError("invalid view")
    return view


def validate_date(val: str) -> str:
    try:
        return datetime.strptime(val, "%Y-%m-%d").date().isoformat()
    except (TypeError, ValueError):
        raise ValueError("invalid date, expected YYYY-MM-DD")


def validate_timestamp(val: str) -> str:
    """Comment dates: a plain date or a full ISO timestamp."""
    try:
        datetime.fromisoformat(val.replace("Z", "+00:00"))
        return val
    except (AttributeError, ValueError):
        raise ValueError("invalid date")


def validate_amount(val):
    if val is None or val == "":
        return 0
    if isinstance(val, bool):
        raise ValueError("invalid amount")
    try:
        x = float(val)
    except (TypeError, ValueError):
        raise ValueError("invalid amount")
    if math.isnan(x) or math.isinf(x) or x < 0:
        raise ValueError("invalid amount")
    return int(x) if x.is_integer() else x


def validate_asset_payload(data: dict) -> dict:
    """
    Check a submitted snapshot and return the row to store. total_asset and
    net_worth are kept as sent; they are only derived when absent.
    """
    require_fields(data, ("date", "owner"))
    owner = data["owner"].strip()
    validate_owner(owner)

    if "stock_value" not in data and "stock_krw" in data:
        data = dict(data, stock_value=data["stock_krw"])

    row = {"date": validate_date(data["date"].strip()), "owner": owner}
    for field in ASSET_AMOUNT_FIELDS:
        try:
            row[field] = validate_amount(data.get(field))
        except ValueError:
            raise ValueError(f"invalid amount for {field}")

    total = row["net_cash"] + row["savings"] + row["stock_value"] + row["fixed_asset"]
    row["total_asset"] = _sent_total(data, "total_asset", total)
    row["net_worth"] = _sent_total(data, "net_worth", row["total_asset"] - row["long_loan"])
    row["memo"] = _text(data.get("memo"))
    return row


def _sent_total(data: dict, field: str, default):
    # derived totals may be negative (net worth under a loan)
    sent = data.get(field)
    if sent is None or sent == "":
        return default
    if isinstance(sent, bool):
        raise ValueError(f"invalid amount for {field}")
    try:
        x = float(sent)
    except (TypeError, ValueError):
        raise ValueError(f"invalid amount for {field}")
    if math.isnan(x) or math.isinf(x):
        raise ValueError(f"invalid amount for {field}")
    return int(x) if x.is_integer() else x


def validate_comment_payload(data: dict) -> dict:
    require_fields(data, ("date", "owner", "message"))
    return {
        "date": validate_timestamp(data["date"].strip()),
        "owner": data["owner"].strip(),
        "message": data["message"].strip(),
    }


def validate_row_ids(rows) -> list:
    if not isinstance(rows, list) or not rows:
        raise ValueError("rows must be a non-empty list of row ids")
    out = []
    for r in rows:
        if isinstance(r, bool) or not isinstance(r, int) or r < 1:
            raise ValueError("invalid row id")
        out.append(r)
    return out
