# workforce_api/common/paging.py
from flask import request

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_PAGE = 100_000

def page_limit(default_limit=DEFAULT_LIMIT, max_limit=MAX_LIMIT):
    """
    - page (default 1)
    - limit (default 20), 'size' accepted as alias
    Clamped to [1, MAX_PAGE] and [1, max_limit]
    """
    try:
        page = max(1, min(int(request.args.get("page", DEFAULT_PAGE)), MAX_PAGE))
    except Exception:
        page = DEFAULT_PAGE
    raw = request.args.get("limit", None)
    if raw is None:
        raw = request.args.get("size", None)
    try:
        limit = int(raw) if raw is not None else default_limit
        limit = max(1, min(limit, max_limit))
    except Exception:
        limit = default_limit
    return page, limit

def text_q():
    q = request.args.get("q", "") or request.args.get("search", "")
    return q.strip() or None
