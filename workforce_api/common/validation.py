# workforce_api/common/validation.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional
from urllib.parse import urlparse

from workforce_api.common.errors import ValidationError

# Numeric(14, 2) columns hold at most 12 integer digits
MAX_AMOUNT = Decimal("1e12")


def parse_id(raw: Any, label: str = "record") -> int:
    """
    IDs are positive integers. Anything else is rejected before it reaches the DB.
    """
    if isinstance(raw, bool):
        raise ValidationError(f"Invalid {label} ID")
    try:
        val = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} ID")
    if val <= 0:
        raise ValidationError(f"Invalid {label} ID")
    return val


def parse_id_list(raw: Any, label: str = "record") -> List[int]:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise ValidationError(f"At least one {label} is required")
    out: List[int] = []
    for x in raw:
        i = parse_id(x, label)
        if i not in out:
            out.append(i)
    return out


def parse_date(val: Any, field: str, required: bool = False) -> Optional[date]:
    if val in (None, ""):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    s = str(val).strip()
    for fmt in ("%Y-%m-%d", "%d-%m-%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            pass
    # ISO timestamps from browsers: keep the date part
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError(f"{field} must be YYYY-MM-DD")


def parse_amount(val: Any, field: str = "amount", required: bool = False) -> Optional[Decimal]:
    if val in (None, ""):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if isinstance(val, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        d = Decimal(str(val))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not d.is_finite() or d <= 0:
        raise ValidationError(f"{field} must be positive")
    if d >= MAX_AMOUNT:
        raise ValidationError(f"{field} must be less than {MAX_AMOUNT:,.0f}")
    return d.quantize(Decimal("0.01"))


def parse_bool(val: Any, field: str) -> bool:
    if isinstance(val, bool):
        return val
    s = str(val).strip().lower() if val is not None else ""
    if s in ("true", "1", "yes"):
        return True
    if s in ("false", "0", "no"):
        return False
    raise ValidationError(f"{field} must be true/false")


def parse_url(val: Any, field: str = "proof_url") -> Optional[str]:
    if val in (None, ""):
        return None
    s = str(val).strip()
    u = urlparse(s)
    if u.scheme not in ("http", "https") or not u.netloc:
        raise ValidationError(f"Invalid {field.replace('_', ' ')}")
    return s


def clean_str(val: Any, field: str, required: bool = False, max_len: int | None = None) -> Optional[str]:
    s = (str(val).strip() if val is not None else "") or None
    if s is None and required:
        raise ValidationError(f"{field} is required")
    if s and max_len and len(s) > max_len:
        raise ValidationError(f"{field} must be at most {max_len} characters")
    return s
