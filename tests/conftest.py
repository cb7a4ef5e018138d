import pytest


@pytest.fixture(autouse=True)
def _isolated_ttl_cache(tmp_path, monkeypatch):
    # keep SODA3 response caching out of the repo tree
    monkeypatch.setenv("FO_TTL_CACHE_DIR", str(tmp_path / "ttl"))
