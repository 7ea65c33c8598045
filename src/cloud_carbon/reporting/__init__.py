# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Reporting layer: renders calculated emissions."""

from cloud_carbon.reporting.terminal import TerminalReporter

__all__ = ["TerminalReporter"]
