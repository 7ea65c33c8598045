# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""In-process event bus decoupling schedulers from the calculator."""

from cloud_carbon.bus.bus import EventBus, EventHandler
from cloud_carbon.bus.events import Event, Topic, emissions_calculated, metrics_collected

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "Topic",
    "emissions_calculated",
    "metrics_collected",
]
