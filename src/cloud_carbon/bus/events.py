# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Event envelope and the closed set of bus topics."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from cloud_carbon.data.models import Instance


class Topic(str, Enum):
    """Every topic that can flow through the bus."""

    metrics_collected = "metrics_collected"
    emissions_calculated = "emissions_calculated"


class Event(BaseModel):
    """An ephemeral ``{topic, payload}`` envelope. Never persisted."""

    topic: Topic
    payload: Any = None
    interval: Optional[timedelta] = Field(
        default=None, description="Sampling interval the payload was collected over"
    )


def metrics_collected(instance: Instance, interval: timedelta | None = None) -> Event:
    return Event(topic=Topic.metrics_collected, payload=instance, interval=interval)


def emissions_calculated(instance: Instance, interval: timedelta | None = None) -> Event:
    return Event(topic=Topic.emissions_calculated, payload=instance, interval=interval)
