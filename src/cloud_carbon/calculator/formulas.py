# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Operational and embodied emission formulas.

Every function returns grams of CO2e.  Inputs arrive already resolved:
grid intensity in grams/kWh, PUE as a multiplier, a wattage curve for
the instance kind.
"""

from __future__ import annotations

import logging
from datetime import timedelta

import numpy as np
from scipy.interpolate import CubicSpline

from cloud_carbon.data.models import Metric, MetricKind, WattageCurve
from cloud_carbon.errors import DegenerateInputError, NotImplementedMetricError
from cloud_carbon.factors.resolver import GridFactors, ResolvedModel

logger = logging.getLogger(__name__)


def cubic_spline_interpolation(curve: WattageCurve, usage: float) -> float:
    """Return the power draw in kilowatts at *usage* percent.

    Fits a natural cubic spline through the curve's control points.  A
    usage outside the points' percentage range is clamped to the nearest
    end, so bursting above 100 % reads as the full-load wattage.  A single
    control point is a constant curve.
    """
    if len(curve) == 0:
        raise DegenerateInputError("cannot calculate CPU energy, no wattage found")

    x = np.array([w.percentage for w in curve.points], dtype=float)
    y = np.array([w.wattage for w in curve.points], dtype=float)
    if len(x) == 1:
        return float(y[0]) / 1000

    clamped = float(np.clip(usage, x[0], x[-1]))
    exact = np.flatnonzero(x == clamped)
    if exact.size:
        return float(y[exact[0]]) / 1000

    try:
        spline = CubicSpline(x, y, bc_type="natural")
    except ValueError as exc:
        raise DegenerateInputError(f"invalid wattage curve: {exc}") from exc
    return float(spline(clamped)) / 1000


def cpu(interval: timedelta, metric: Metric, grid: GridFactors, model: ResolvedModel) -> float:
    """CO2e operational emissions of a CPU utilization sample over *interval*."""
    # dataset vCPU first, then the count reported with the sample
    vcpu = model.vcpu
    if vcpu == 0:
        if metric.unit_amount == 0:
            raise DegenerateInputError("vCPU set to 0")
        vcpu = metric.unit_amount

    # e.g. 4 vCPU over 5 minutes: 5/60 * 4 = 0.333 vCPU hours
    vcpu_hours = (interval.total_seconds() / 60 / 60) * vcpu

    usage_kw = cubic_spline_interpolation(model.curve, metric.usage)

    logger.debug(
        "CPU calculation: kw=%s vcpu_hours=%s pue=%s grid=%s",
        usage_kw, vcpu_hours, grid.pue, grid.grid_co2e,
    )
    return usage_kw * vcpu_hours * grid.pue * grid.grid_co2e


def operational_emissions(
    interval: timedelta, metric: Metric, grid: GridFactors, model: ResolvedModel
) -> float:
    """Dispatch to the formula for the metric's kind."""
    if metric.kind is MetricKind.cpu:
        return cpu(interval, metric, grid, model)
    if metric.kind in (MetricKind.memory, MetricKind.storage, MetricKind.network):
        raise NotImplementedMetricError(metric.kind.value)
    raise NotImplementedMetricError(str(metric.kind))


def embodied_emissions(interval: timedelta, hourly_embodied: float) -> float:
    """Hardware manufacture/decommission emissions allocated to *interval*."""
    return hourly_embodied / 60 * (interval.total_seconds() / 60)
