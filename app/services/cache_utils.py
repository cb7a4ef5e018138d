from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from tempfile import NamedTemporaryFile
from typing import Any, Optional

log = logging.getLogger(__name__)


# Disk-backed TTL cache for upstream API responses. Defaults to .cache/ttl under the repo root.
def _base_dir() -> str:
    default = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".cache", "ttl"))
    return os.getenv("FO_TTL_CACHE_DIR", default)


def _safe_namespace(ns: str) -> str:
    return "".join(ch for ch in (ns or "default") if ch.isalnum() or ch in ("_", "-")).strip() or "default"


def _cache_path(namespace: str, key: str) -> str:
    hashed = hashlib.sha1(key.encode("utf-8")).hexdigest()
    base = os.path.join(_base_dir(), _safe_namespace(namespace))
    os.makedirs(base, exist_ok=True)
    return os.path.join(base, f"{hashed}.json")


def load_ttl_cache(namespace: str, key: str) -> Optional[Any]:
    """
    Cached data when the entry exists and is still fresh, else None.
    Expired or unreadable entries are removed.
    """
    path = _cache_path(namespace, key)
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        expires_at = float(payload.get("expires_at", 0))
    except (OSError, ValueError, AttributeError):
        log.warning("dropping unreadable cache entry %s", path)
        expires_at = 0.0
        payload = {}
    if expires_at <= time.time():
        try:
            os.remove(path)
        except OSError:
            pass
        return None
    return payload.get("data")


def store_ttl_cache(namespace: str, key: str, data: Any, ttl_seconds: int) -> None:
    """
    Write data with a TTL, replacing any existing entry atomically.
    A non-positive TTL disables caching.
    """
    if ttl_seconds <= 0:
        return
    path = _cache_path(namespace, key)
    payload = {"data": data, "expires_at": time.time() + ttl_seconds}
    tmp = NamedTemporaryFile("w", delete=False, dir=os.path.dirname(path), encoding="utf-8")
    try:
        json.dump(payload, tmp)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp.close()
        os.replace(tmp.name, path)
    finally:
        if not tmp.closed:
            tmp.close()
        if os.path.exists(tmp.name):
            os.unlink(tmp.name)
    purge_expired(namespace)


def purge_expired(namespace: str) -> int:
    """
    Remove expired or unreadable entries in a namespace. Keys that embed a date
    are never read again once the date rolls over, so reads alone can't reclaim them.
    """
    base = os.path.join(_base_dir(), _safe_namespace(namespace))
    if not os.path.isdir(base):
        return 0
    now = time.time()
    removed = 0
    for fname in os.listdir(base):
        if not fname.endswith(".json"):
            continue
        fpath = os.path.join(base, fname)
        try:
            with open(fpath, "r", encoding="utf-8") as f:
                expires_at = float(json.load(f).get("expires_at", 0))
        except (OSError, ValueError, AttributeError):
            expires_at = 0.0
        if expires_at > now:
            continue
        try:
            os.remove(fpath)
            removed += 1
        except OSError:
            continue
    return removed
