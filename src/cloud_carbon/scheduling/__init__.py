# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Per-account collection scheduling."""

from cloud_carbon.scheduling.scheduler import AccountScheduler, SchedulerState, new_schedulers

__all__ = ["AccountScheduler", "SchedulerState", "new_schedulers"]
