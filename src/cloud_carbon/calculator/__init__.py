# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Emissions calculator subscribed to collected metrics."""

from cloud_carbon.calculator.formulas import (
    cpu,
    cubic_spline_interpolation,
    embodied_emissions,
    operational_emissions,
)
from cloud_carbon.calculator.handler import CalculatorHandler

__all__ = [
    "CalculatorHandler",
    "cpu",
    "cubic_spline_interpolation",
    "embodied_emissions",
    "operational_emissions",
]
