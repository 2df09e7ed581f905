# ============================================================================
# PageVital - Web Vitals Collector
#
# Purpose: Merge passively observed Web Vitals (layout shifts, LCP, first
#          input, interactions, paints) with actively queried navigation,
#          resource, device and connection data into a MetricsSnapshot
# Inputs: Host page adapter (window / performance / navigator), observer entries
# Outputs: MetricsSnapshot, DiagnosticReport
# Dependencies: threading, config, diagnostics, reporting.schema
# Usage: collector = WebVitalsCollector(host); collector.start()
#        snapshot = collector.get_detailed_metrics()
#
# Changelog:
#   2026-09-02: Initial collector (CLS/LCP/FID observers, navigation timing)
#   2026-09-05: Slow-resource detection with configurable threshold and cap
#   2026-09-14: INP and paint observers; accumulators guarded by a lock so a
#               reader on another thread never sees a half-applied update
#   2026-09-21: get_detailed_metrics() falls back to an all-default snapshot
#               if building one fails for any reason
# ============================================================================

import threading
from typing import Any, Callable, Dict, List, Optional

from PageVital.config import CollectorConfig
from PageVital.diagnostics import analyze_snapshot
from PageVital.errors import InstrumentationUnavailable
from PageVital.instrumentation.host import read_field, read_number, read_optional_number
from PageVital.logging_utils import get_logger
from PageVital.reporting.schema import (
    ConnectionInfo,
    DeviceInfo,
    DiagnosticReport,
    MetricsSnapshot,
    PageInfo,
    ResourceTiming,
    SlowResource,
    Viewport,
)
from PageVital.utils.time import now_ms

logger = get_logger(__name__)

# Performance entry types
LAYOUT_SHIFT = "layout-shift"
LARGEST_CONTENTFUL_PAINT = "largest-contentful-paint"
FIRST_INPUT = "first-input"
EVENT = "event"
PAINT = "paint"
NAVIGATION = "navigation"
RESOURCE = "resource"


class WebVitalsCollector:
    """
    Collects Web Vitals for one page.

    The host is any object exposing (optionally) ``window``, ``performance``,
    ``navigator`` and ``performance_observer``; see ``PageVital.instrumentation.host``
    for how fields are read. Every host API may be absent: the collector then
    reports 0 for timings and conservative device defaults.
    """

    def __init__(self, host: Any = None, config: Optional[CollectorConfig] = None):
        """
        Args:
            host: Host page adapter, or None when no instrumentation is available
            config: Collector configuration (defaults when omitted)
        """
        self.host = host
        self.config = config or CollectorConfig()
        self._lock = threading.Lock()
        self._observers: List[Any] = []
        self._cls = 0.0
        self._lcp = 0.0
        self._fid = 0.0
        self._inp = 0.0
        self._fcp = 0.0
        self._first_paint = 0.0
        self._handlers: Dict[str, Callable[[Any], None]] = {
            LAYOUT_SHIFT: self.record_layout_shift,
            LARGEST_CONTENTFUL_PAINT: self.record_largest_contentful_paint,
            FIRST_INPUT: self.record_first_input,
            EVENT: self.record_interaction,
            PAINT: self.record_paint,
        }

    # ------------------------------------------------------------------
    # Observer lifecycle
    # ------------------------------------------------------------------

    def start(self) -> int:
        """
        Register observers on the host for every passively observed entry type.

        Returns:
            Number of observers registered (0 when the observer API is missing)
        """
        try:
            factory = self._observer_factory()
        except InstrumentationUnavailable as e:
            logger.debug(f"{e}; relying on queried entries only")
            return 0

        registered = 0
        for entry_type in self._handlers:
            try:
                observer = factory(self._make_callback(entry_type))
                observer.observe(type=entry_type, buffered=True)
            except Exception as e:
                logger.warning(f"Could not observe {entry_type!r} entries: {e}")
                continue
            self._observers.append(observer)
            registered += 1

        logger.info(f"WebVitalsCollector observing {registered} entry type(s)")
        return registered

    def _observer_factory(self) -> Callable[..., Any]:
        factory = read_field(self.host, "performance_observer")
        if factory is None or not callable(factory):
            raise InstrumentationUnavailable("Performance observer API unavailable")
        return factory

    def stop(self) -> None:
        """Disconnect all registered observers."""
        observers, self._observers = self._observers, []
        for observer in observers:
            try:
                observer.disconnect()
            except Exception as e:
                logger.debug(f"Observer disconnect failed: {e}")

    def reset(self) -> None:
        """Clear passively accumulated values (e.g. on a soft navigation)."""
        with self._lock:
            self._cls = 0.0
            self._lcp = 0.0
            self._fid = 0.0
            self._inp = 0.0
            self._fcp = 0.0
            self._first_paint = 0.0

    def _make_callback(self, entry_type: str) -> Callable[..., None]:
        def _callback(entry_list: Any, *_: Any) -> None:
            self.handle_entries(entry_type, entry_list)

        return _callback

    def handle_entries(self, entry_type: str, entries: Any) -> None:
        """Feed a batch of observer entries. Unknown types are ignored."""
        handler = self._handlers.get(entry_type)
        if handler is None:
            return
        get_entries = read_field(entries, "get_entries")
        try:
            batch = list(get_entries()) if callable(get_entries) else list(entries or [])
        except Exception as e:
            logger.debug(f"Unreadable {entry_type!r} entry list: {e}")
            return
        for entry in batch:
            try:
                handler(entry)
            except Exception as e:
                logger.debug(f"Skipping malformed {entry_type!r} entry: {e}")

    # ------------------------------------------------------------------
    # Instrumentation callbacks
    # ------------------------------------------------------------------

    def record_layout_shift(self, entry: Any) -> None:
        """Add a layout shift to the running CLS total unless caused by user input."""
        if read_field(entry, "had_recent_input", default=False):
            return
        value = read_number(entry, "value")
        with self._lock:
            self._cls += value

    def record_largest_contentful_paint(self, entry: Any) -> None:
        """The latest LCP candidate wins."""
        value = read_number(entry, "start_time", "render_time", "load_time")
        with self._lock:
            self._lcp = value

    def record_first_input(self, entry: Any) -> None:
        """FID = processingStart - startTime of the first input."""
        start = read_number(entry, "start_time")
        processing_start = read_number(entry, "processing_start", default=start)
        with self._lock:
            self._fid = max(0.0, processing_start - start)

    def record_interaction(self, entry: Any) -> None:
        """INP approximated as the slowest interaction seen so far."""
        if read_field(entry, "interaction_id", default=0) in (0, None):
            return
        duration = read_number(entry, "duration")
        with self._lock:
            self._inp = max(self._inp, duration)

    def record_paint(self, entry: Any) -> None:
        name = read_field(entry, "name", default="")
        value = read_number(entry, "start_time")
        with self._lock:
            if name == "first-contentful-paint":
                self._fcp = value
            elif name == "first-paint":
                self._first_paint = value

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def get_detailed_metrics(self) -> MetricsSnapshot:
        """
        Build a snapshot of everything known about the page right now.

        Never raises: any failure yields a snapshot with default values.
        """
        try:
            return self._build_snapshot()
        except Exception as e:
            logger.warning(f"Falling back to default metrics snapshot: {e}", exc_info=True)
            return MetricsSnapshot(
                device=self._default_device(),
                page=PageInfo(timestamp=now_ms()),
            )

    def _build_snapshot(self) -> MetricsSnapshot:
        with self._lock:
            observed = {
                "cls": self._cls,
                "lcp": self._lcp,
                "fid": self._fid,
                "inp": self._inp,
                "fcp": self._fcp,
                "first_paint": self._first_paint,
            }

        navigation = self._first_entry(NAVIGATION)
        paints = {read_field(p, "name"): read_number(p, "start_time") for p in self._entries(PAINT)}

        return MetricsSnapshot(
            cls=observed["cls"],
            lcp=observed["lcp"],
            fid=observed["fid"],
            inp=observed["inp"],
            fcp=observed["fcp"] or paints.get("first-contentful-paint", 0.0),
            first_paint=observed["first_paint"] or paints.get("first-paint", 0.0),
            ttfb=read_number(navigation, "response_start"),
            dom_content_loaded=read_number(navigation, "dom_content_loaded_event_end"),
            load_complete=read_number(navigation, "load_event_end"),
            resource_timing=self._resource_timing(),
            device=self._device_info(),
            connection=self._connection_info(),
            page=self._page_info(),
        )

    def _entries(self, entry_type: str) -> List[Any]:
        performance = read_field(self.host, "performance")
        get_entries_by_type = read_field(performance, "get_entries_by_type")
        if not callable(get_entries_by_type):
            return []
        try:
            return list(get_entries_by_type(entry_type) or [])
        except Exception as e:
            logger.debug(f"performance.get_entries_by_type({entry_type!r}) failed: {e}")
            return []

    def _first_entry(self, entry_type: str) -> Any:
        entries = self._entries(entry_type)
        return entries[0] if entries else None

    def _resource_timing(self) -> ResourceTiming:
        entries = self._entries(RESOURCE)
        threshold = self.config.slow_resource_threshold_ms
        slow: List[SlowResource] = []
        total_size = 0.0
        total_duration = 0.0

        for entry in entries:
            duration = read_number(entry, "duration")
            size = read_number(entry, "transfer_size")
            total_size += size
            total_duration += duration
            if duration > threshold and len(slow) < self.config.max_slow_resources:
                slow.append(
                    SlowResource(
                        name=str(read_field(entry, "name", default="unknown")),
                        duration=duration,
                        size=size,
                        type=str(read_field(entry, "initiator_type", default="other")),
                    )
                )

        return ResourceTiming(
            total_resources=len(entries),
            slow_resources=tuple(slow),
            total_size=total_size,
            total_duration=total_duration,
        )

    def _default_device(self) -> DeviceInfo:
        return DeviceInfo(
            viewport=Viewport(
                width=self.config.default_viewport_width,
                height=self.config.default_viewport_height,
            )
        )

    def _device_info(self) -> DeviceInfo:
        navigator = read_field(self.host, "navigator")
        window = read_field(self.host, "window")
        if navigator is None and window is None:
            return self._default_device()

        cores = read_optional_number(navigator, "hardware_concurrency")
        return DeviceInfo(
            memory=read_optional_number(navigator, "device_memory"),
            cores=int(cores) if cores is not None else None,
            user_agent=str(read_field(navigator, "user_agent", default="unknown")),
            viewport=Viewport(
                width=int(read_number(window, "inner_width", default=self.config.default_viewport_width)),
                height=int(read_number(window, "inner_height", default=self.config.default_viewport_height)),
            ),
        )

    def _connection_info(self) -> Optional[ConnectionInfo]:
        connection = read_field(read_field(self.host, "navigator"), "connection")
        if connection is None:
            return None
        return ConnectionInfo(
            effective_type=str(read_field(connection, "effective_type", default="unknown")),
            downlink=read_number(connection, "downlink"),
            rtt=read_number(connection, "rtt"),
            save_data=bool(read_field(connection, "save_data", default=False)),
        )

    def _page_info(self) -> PageInfo:
        window = read_field(self.host, "window")
        document = read_field(window, "document") or read_field(self.host, "document")
        location = read_field(window, "location")
        url = read_field(location, "href") if location is not None and not isinstance(location, str) else location
        return PageInfo(
            url=str(url or ""),
            referrer=str(read_field(document, "referrer", default="")),
            title=str(read_field(document, "title", default="")),
            timestamp=now_ms(),
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def generate_diagnostic_report(self, snapshot: Optional[MetricsSnapshot] = None) -> DiagnosticReport:
        """
        Score the page and list issues with recommendations.

        Args:
            snapshot: Snapshot to analyze; collected fresh when omitted

        Returns:
            DiagnosticReport with score in [0, 100]
        """
        metrics = snapshot if snapshot is not None else self.get_detailed_metrics()
        analysis = analyze_snapshot(metrics)
        logger.info(f"Diagnostic score {analysis.score:.1f} with {len(analysis.issues)} issue(s) for {metrics.page.url}")
        return DiagnosticReport(metrics=metrics, analysis=analysis)
