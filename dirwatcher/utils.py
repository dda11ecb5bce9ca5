"""
This module provides a worker thread that runs a function periodically,
plus a factory to spawn it.

The polling notifier uses it to take a snapshot of the watched tree every
poll interval. The worker runs until its stop signal is set.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class PeriodicWorker(threading.Thread):
    """
    A thread that runs a worker function periodically every `interval` seconds.
    """

    def __init__(self, worker_fn, interval, *args, name=None, **kwargs):
        """
        Initialize the periodic worker thread.

        Args:
            worker_fn (callable): The function to run periodically.
            interval (float): Time in seconds between each call.
            *args: Positional arguments passed to worker_fn.
            name (str, optional): Thread name.
            **kwargs: Keyword arguments passed to worker_fn.
        """
        super().__init__(name=name)
        self.worker_fn = worker_fn
        self.interval = interval
        self.args = args
        self.kwargs = kwargs
        self.stop_event = threading.Event()
        self.daemon = True

    def run(self):
        """
        Run the worker function periodically until a stop signal is received.
        """
        logger.debug("PeriodicWorker %s started with interval: %s seconds", self.name, self.interval)
        while not self.stop_event.is_set():
            try:
                self.worker_fn(*self.args, **self.kwargs)
            except Exception as e:
                logger.exception("Exception in periodic worker function: %s", e)
            # Wait for the interval, but exit early if stop_event is set.
            if self.stop_event.wait(self.interval):
                break
        logger.debug("PeriodicWorker %s stopped.", self.name)

    def stop(self):
        """
        Signal the thread to stop.
        """
        logger.debug("PeriodicWorker %s received stop signal.", self.name)
        self.stop_event.set()


def spawn_periodic_worker(worker_fn, interval, *args, name=None, **kwargs):
    """
    Factory function to spawn a periodic worker thread.

    Args:
        worker_fn (callable): Function to execute periodically.
        interval (float): Time interval in seconds between executions.
        *args: Positional arguments for worker_fn.
        name (str, optional): Thread name.
        **kwargs: Keyword arguments for worker_fn.

    Returns:
        PeriodicWorker: The running periodic worker thread instance.
    """
    worker = PeriodicWorker(worker_fn, interval, *args, name=name, **kwargs)
    worker.start()
    logger.debug("spawn_periodic_worker: Started PeriodicWorker %s.", worker.name)
    return worker
