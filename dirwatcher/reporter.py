"""
Reporter module for DirWatcher.

Renders classified events as timestamped log lines. This is the only place
that knows about wall-clock time; classified events carry no timestamp.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from dirwatcher import config as config_module
from dirwatcher import logger as dw_logger
from dirwatcher.events import ClassifiedEvent, ClassifiedKind

DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z"


class Reporter:
    """
    Writes classified events to a logger.

    Attributes:
        logger: Destination logger; its handlers decide the sink.
        tz: Fixed-offset timezone used for timestamps.
        timestamp_format: strftime format for timestamps.
    """

    def __init__(
        self,
        logger: logging.Logger,
        utc_offset_hours: float = -5,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.logger = logger
        self.tz = timezone(timedelta(hours=utc_offset_hours))
        self.timestamp_format = timestamp_format
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def timestamp(self) -> str:
        return self._clock().astimezone(self.tz).strftime(self.timestamp_format)

    def format_event(self, event: ClassifiedEvent) -> str:
        ts = self.timestamp()
        if event.kind is ClassifiedKind.TOP_LEVEL_CREATED:
            return f"New top-level directory created: {event.path!r}, {ts}"
        if event.kind is ClassifiedKind.TOP_LEVEL_MOVED:
            return f"Directory {event.old_name!r} moved to: {event.new_path!r}, {ts}"
        if event.kind is ClassifiedKind.TOP_LEVEL_REMOVED:
            return f"Directory removed: {event.path!r}, {ts}"
        return f"Error: {event.diagnostic}, {ts}"

    def report(self, event: ClassifiedEvent) -> None:
        level = logging.ERROR if event.kind is ClassifiedKind.WATCH_ERROR else logging.INFO
        self.logger.log(level, self.format_event(event))

    def initially_found(self, path: str) -> None:
        self.logger.info(f"Initially found directory: {path!r}, {self.timestamp()}")

    def monitoring_started(self) -> None:
        self.logger.info(f"Monitoring for changes, {self.timestamp()}")


def reporter_from_config(config_data) -> Reporter:
    """
    Build a Reporter writing to the configured log file and console.
    """
    log_cfg = config_data["logging"]
    report_logger = dw_logger.setup_logger(
        "DirWatcherEvents",
        config_module.get_log_dir(config_data),
        log_cfg["log_file"],
        level=dw_logger.resolve_level(log_cfg["level"]),
        console=log_cfg["console"],
        fmt=dw_logger.REPORT_FORMAT,
    )
    return Reporter(
        report_logger,
        utc_offset_hours=log_cfg["utc_offset_hours"],
        timestamp_format=log_cfg["timestamp_format"],
    )
