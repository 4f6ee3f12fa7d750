from __future__ import annotations

import pytest

from tenancy.config import Settings


def test_local_defaults():
    s = Settings(app_env="local")
    assert s.evidence_folder == "deposit-evidence"
    assert s.history_default_limit == 20


def test_prod_rejects_dev_auto_provision():
    with pytest.raises(ValueError):
        Settings(app_env="prod", dev_auto_provision=True, cors_allow_origins=["https://app.example.com"])


def test_prod_rejects_wildcard_cors():
    with pytest.raises(ValueError):
        Settings(app_env="production", dev_auto_provision=False, cors_allow_origins=["*"])


def test_prod_with_explicit_origins():
    s = Settings(app_env="prod", dev_auto_provision=False, cors_allow_origins=["https://app.example.com"])
    assert s.cors_allow_origins == ["https://app.example.com"]
