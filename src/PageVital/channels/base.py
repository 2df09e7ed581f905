# ============================================================================
# PageVital - Base Alert Channel Interface
#
# Purpose: Abstract base class for alert delivery channels
# Inputs: Alert objects
# Outputs: Channel-specific side effect
# Dependencies: abc, reporting.schema
# Usage: class MyChannel(AlertChannel): ...
#
# Changelog:
#   2026-09-14: Initial AlertChannel interface
# ============================================================================

from abc import ABC, abstractmethod
from typing import Any

from PageVital.reporting.schema import Alert


class AlertChannel(ABC):
    """
    Abstract base class for alert delivery channels.

    Channels must not raise into the alert system: delivery failures are
    logged by the channel and reported through its return value.
    """

    name: str = "channel"

    @abstractmethod
    def deliver(self, alert: Alert) -> Any:
        """
        Deliver one alert.

        Args:
            alert: Alert to deliver

        Returns:
            Channel-specific result (None, or a completion handle for
            asynchronous channels)
        """
        pass

    def close(self) -> None:
        """Release channel resources. Default: nothing to release."""
        return None
