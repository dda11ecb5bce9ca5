import os
import signal
import time

import daemon
import psutil
from daemon.pidfile import PIDLockFile

from dirwatcher import config as config_module
from dirwatcher import logger
from dirwatcher.monitor import Monitor
from dirwatcher.reporter import reporter_from_config


def setup_daemon_logger(config):
    """
    Set up diagnostic logging for the daemon.

    The logger is the package logger, so messages from every dirwatcher
    module end up in daemon.log next to the event log.

    Args:
        config (dict): The loaded configuration dictionary

    Returns:
        logging.Logger: Configured logger instance
    """
    log_dir = config_module.get_log_dir(config)
    log_level = logger.resolve_level(config["logging"]["level"])

    daemon_logger = logger.setup_logger(
        "dirwatcher",
        log_dir,
        "daemon.log",
        level=log_level,
        console=config["logging"]["console"],
    )
    daemon_logger.info("Daemon logger initialized successfully")
    daemon_logger.info(f"Using config from: {config.get(config_module.CONFIG_PATH_KEY)}")
    daemon_logger.info(f"Log directory: {log_dir}")
    return daemon_logger


def collect_status(pid, config):
    """
    Gather process information for a running watcher.

    Raises:
        psutil.NoSuchProcess: If no process has the given pid.

    Returns:
        dict: Property name to value, in display order.
    """
    proc = psutil.Process(pid)
    return {
        "PID": proc.pid,
        "CPU %": proc.cpu_percent(interval=0.1),
        "Memory %": round(proc.memory_percent(), 2),
        "Memory RSS": proc.memory_info().rss,
        "Threads": proc.num_threads(),
        "Started At": time.strftime(
            "%Y-%m-%d %H:%M:%S", time.localtime(proc.create_time())
        ),
        "Watch Root": config_module.get_watch_root(config),
        "Backend": config["watch"]["backend"],
    }


def log_daemon_status(daemon_logger, config):
    """
    Log process status information for the current process.
    """
    try:
        status_info = collect_status(os.getpid(), config)
        daemon_logger.info(
            "Daemon Status:\n" + "\n".join(f"{k}: {v}" for k, v in status_info.items())
        )
    except psutil.Error as e:
        daemon_logger.error(f"Error logging daemon status: {e}")


def _open_streams(log):
    return [
        handler.stream.fileno()
        for handler in log.handlers
        if hasattr(handler, "stream") and hasattr(handler.stream, "fileno")
    ]


def make_stop_handler(monitor):
    """
    Build a signal handler that ends the monitor loop.

    The handler runs on the thread blocked in monitor.run(), so it only sets
    the monitor's stop event. Stopping the notifier happens after run()
    returns.
    """
    def handle_stop(signum, frame):
        monitor.request_stop()

    return handle_stop


def run_daemon(config, pid_file):
    """Detach from the terminal and watch the configured root until SIGTERM."""
    daemon_logger = setup_daemon_logger(config)
    reporter = reporter_from_config(config)
    monitor = Monitor(config, reporter)

    context = daemon.DaemonContext(
        pidfile=PIDLockFile(pid_file),
        working_directory=os.getcwd(),
        files_preserve=_open_streams(daemon_logger) + _open_streams(reporter.logger),
        signal_map={signal.SIGTERM: make_stop_handler(monitor)},
    )

    with context:
        try:
            daemon_logger.info(f"Daemon started. Watching {monitor.root}")
            monitor.start()
            log_daemon_status(daemon_logger, config)
            monitor.run()
            daemon_logger.info("Stop requested, shutting down.")
        except Exception as e:
            daemon_logger.error(f"Fatal error in daemon: {e}", exc_info=True)
            raise
        finally:
            monitor.stop()
            daemon_logger.info("Daemon stopped.")
