"""
Structured diagnostic events.

Components report what happened at each probe (a candidate path reverting, a
fee tier with no pool, an aggregator timeout) as DiagnosticEvent records.
Events are logged and forwarded to optional sinks; they never feed back into
control flow.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

EventSink = Callable[["DiagnosticEvent"], None]


@dataclass(frozen=True)
class DiagnosticEvent:
    """
    A single diagnostic event.

    Attributes:
        component: Emitting component (e.g., "v2", "v3", "aggregator")
        kind: Machine-readable event kind (e.g., "v3_tier_failed")
        message: Human-readable description
        fields: Extra structured context
        timestamp: Unix timestamp of emission
    """

    component: str
    kind: str
    message: str
    fields: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


class Diagnostics:
    """Emits diagnostic events to the log and to registered sinks."""

    def __init__(self, sinks: Optional[List[EventSink]] = None):
        self._sinks: Tuple[EventSink, ...] = tuple(sinks or ())

    @classmethod
    def recording(cls) -> Tuple["Diagnostics", List[DiagnosticEvent]]:
        """Create an emitter that also appends every event to a list."""
        events: List[DiagnosticEvent] = []
        return cls([events.append]), events

    def emit(
        self,
        component: str,
        kind: str,
        message: str,
        level: int = logging.DEBUG,
        **fields: Any,
    ) -> DiagnosticEvent:
        event = DiagnosticEvent(
            component=component, kind=kind, message=message, fields=fields
        )
        logger.log(level, f"[{component}] {message}")
        for sink in self._sinks:
            sink(event)
        return event


# Shared emitter for components constructed without one
NULL_DIAGNOSTICS = Diagnostics()
