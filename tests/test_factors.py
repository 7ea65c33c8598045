# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Tests for emission-factor stores and two-tier resolution."""

from __future__ import annotations

import pytest

from cloud_carbon.data import BUNDLED_EMISSIONS_PATH
from cloud_carbon.data.models import EmbodiedSpecs, EmissionFactors, Provider
from cloud_carbon.errors import FactorDataError, UnknownInstanceKindError, UnknownRegionError
from cloud_carbon.factors import (
    SERVER_LIFESPAN_YEARS,
    FactorStore,
    FileFactorStore,
    ModelTier,
    hourly_embodied_emissions,
    resolve_grid,
    resolve_instance_model,
)


class TestFileFactorStore:
    def test_loads_provider_factors(self, factors_dir):
        factors = FileFactorStore(factors_dir).get_provider_emission_factors(Provider.aws)
        assert factors.average_pue == 1.2
        assert factors.coefficient["test-region"] == 0.0001
        assert "fallback.kind" in factors.embodied

    def test_loads_instance_specs(self, factors_dir):
        specs = FileFactorStore(factors_dir).get_instance_specs(Provider.aws)
        assert set(specs) == {"precise.kind"}
        assert specs["precise.kind"].vcpu == 4

    def test_missing_provider_file_raises(self, factors_dir):
        with pytest.raises(FactorDataError, match="gcp"):
            FileFactorStore(factors_dir).get_provider_emission_factors(Provider.gcp)

    def test_missing_instance_file_is_empty(self, factors_dir):
        (factors_dir / "aws-instances.yaml").unlink()
        assert FileFactorStore(factors_dir).get_instance_specs(Provider.aws) == {}

    def test_invalid_factors_raise(self, tmp_path):
        (tmp_path / "aws.yaml").write_text("coefficient: {}\n")
        with pytest.raises(FactorDataError, match="invalid emission factors"):
            FileFactorStore(tmp_path).get_provider_emission_factors(Provider.aws)

    def test_unparseable_yaml_raises(self, tmp_path):
        (tmp_path / "aws.yaml").write_text("averagePUE: [1.2\n")
        with pytest.raises(FactorDataError, match="could not parse"):
            FileFactorStore(tmp_path).get_provider_emission_factors(Provider.aws)

    def test_refresh_missing_directory(self, tmp_path):
        with pytest.raises(FactorDataError, match="not found"):
            FileFactorStore(tmp_path / "missing").refresh()

    def test_satisfies_protocol(self, factors_dir):
        assert isinstance(FileFactorStore(factors_dir), FactorStore)

    @pytest.mark.parametrize("provider", list(Provider))
    def test_bundled_dataset_loads(self, provider):
        store = FileFactorStore()
        assert store.data_path == BUNDLED_EMISSIONS_PATH
        factors = store.get_provider_emission_factors(provider)
        assert factors.average_pue > 1.0
        assert factors.coefficient
        assert factors.embodied


class TestResolveGrid:
    def test_converts_tons_to_grams(self, factors_dir):
        factors = FileFactorStore(factors_dir).get_provider_emission_factors(Provider.aws)
        grid = resolve_grid(Provider.aws, "test-region", factors)
        assert grid.grid_co2e == pytest.approx(100.0)
        assert grid.pue == 1.2

    def test_unknown_region_raises(self, factors_dir):
        factors = FileFactorStore(factors_dir).get_provider_emission_factors(Provider.aws)
        with pytest.raises(UnknownRegionError) as info:
            resolve_grid(Provider.aws, "mars-north-1", factors)
        assert info.value.region == "mars-north-1"


class TestResolveInstanceModel:
    @pytest.fixture()
    def tables(self, factors_dir):
        store = FileFactorStore(factors_dir)
        return (
            store.get_provider_emission_factors(Provider.aws),
            store.get_instance_specs(Provider.aws),
        )

    def test_precise_tier(self, tables):
        factors, specs = tables
        model = resolve_instance_model(Provider.aws, "precise.kind", factors, specs)
        assert model.tier is ModelTier.precise
        assert model.vcpu == 4
        assert model.embodied_hourly == 12.0
        assert [p.percentage for p in model.curve.points] == [0, 100]

    def test_precise_tier_wins_over_fallback(self, tables):
        factors, specs = tables
        # precise.kind has fallback specs too, with different watts
        model = resolve_instance_model(Provider.aws, "precise.kind", factors, specs)
        assert model.curve.points[1].wattage == 100

    def test_fallback_tier(self, tables):
        factors, specs = tables
        model = resolve_instance_model(Provider.aws, "fallback.kind", factors, specs)
        assert model.tier is ModelTier.fallback
        assert model.vcpu == 0
        assert [(p.percentage, p.wattage) for p in model.curve.points] == [(0, 10), (100, 100)]
        expected = 1000.0 * ((1 / 24 / 365) / 6) * (2 / 48)
        assert model.embodied_hourly == pytest.approx(expected)

    def test_fallback_when_no_precise_dataset(self, tables):
        factors, _ = tables
        model = resolve_instance_model(Provider.aws, "precise.kind", factors, {})
        assert model.tier is ModelTier.fallback

    def test_unknown_kind_raises(self, tables):
        factors, specs = tables
        with pytest.raises(UnknownInstanceKindError, match="x9.huge"):
            resolve_instance_model(Provider.aws, "x9.huge", factors, specs)


class TestHourlyEmbodied:
    def test_lifespan_constant(self):
        assert SERVER_LIFESPAN_YEARS == 6

    def test_formula(self):
        specs = EmbodiedSpecs(vcpu=4, total_vcpu=96, total_embodied_kwh_co2e=1228.0)
        expected = 1228.0 * (1 / 24 / 365 / 6) * (4 / 96)
        assert hourly_embodied_emissions(specs) == pytest.approx(expected)

    def test_zero_platform_vcpu_raises(self):
        with pytest.raises(FactorDataError):
            hourly_embodied_emissions(EmbodiedSpecs(vcpu=2, total_vcpu=0))

    def test_fallback_zero_platform_vcpu_fails_resolution(self):
        factors = EmissionFactors(
            average_pue=1.1,
            embodied={"odd.kind": EmbodiedSpecs(vcpu=2, min_watts=1, max_watts=2)},
        )
        with pytest.raises(FactorDataError):
            resolve_instance_model(Provider.aws, "odd.kind", factors, {})
