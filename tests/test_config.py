# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Tests for configuration loading."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from cloud_carbon.config import DEFAULT_INTERVAL, AccountConfig, AppConfig, load_config

CONFIG_YAML = """\
interval: 600
collection_timeout_seconds: 5
log_level: DEBUG
cache:
  expiry_seconds: 3600
factors:
  data_path: /opt/factors
providers:
  aws:
    interval: 120
    accounts:
      - id: "111111111111"
        interval: 60
        options: {seed: 7, instance_count: 3}
      - id: "222222222222"
  gcp:
    enabled: false
    accounts:
      - id: my-project
  azure:
    accounts:
      - id: sub-1
"""


class TestLoadConfig:
    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(CONFIG_YAML)
        cfg = load_config(path)

        assert cfg.interval == timedelta(minutes=10)
        assert cfg.collection_timeout_seconds == 5
        assert cfg.log_level == "DEBUG"
        assert cfg.cache.expiry == timedelta(hours=1)
        assert cfg.factors.data_path == "/opt/factors"
        assert set(cfg.providers) == {"aws", "gcp", "azure"}
        assert cfg.providers["gcp"].enabled is False
        assert cfg.providers["aws"].accounts[0].options["seed"] == 7

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        cfg = load_config(path)
        assert cfg.interval == DEFAULT_INTERVAL
        assert cfg.providers == {}
        assert cfg.cache.expiry is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_rejects_bad_timeout(self):
        with pytest.raises(ValidationError):
            AppConfig(collection_timeout_seconds=0)


class TestAccountInterval:
    def test_fallback_chain(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(CONFIG_YAML)
        cfg = load_config(path)
        first, second = cfg.providers["aws"].accounts
        azure = cfg.providers["azure"].accounts[0]

        assert cfg.account_interval("aws", first) == timedelta(minutes=1)
        assert cfg.account_interval("aws", second) == timedelta(minutes=2)
        assert cfg.account_interval("azure", azure) == timedelta(minutes=10)

    def test_unknown_provider_uses_global(self):
        cfg = AppConfig()
        assert cfg.account_interval("aws", AccountConfig(id="x")) == DEFAULT_INTERVAL

    def test_iso_duration(self):
        account = AccountConfig.model_validate({"id": "x", "interval": "PT15M"})
        assert AppConfig().account_interval("aws", account) == timedelta(minutes=15)
