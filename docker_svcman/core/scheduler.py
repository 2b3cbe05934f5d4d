"""
Maintenance scheduler for the Docker Service Manager.

This module runs the runtime cleanup periodically in a background thread.
"""

import time
import logging
import threading
from typing import List, Optional

from docker_svcman.core import system
from docker_svcman.core.controller import ServiceController
from docker_svcman.models.outcome import ServiceOutcome


logger = logging.getLogger('docker_svcman.scheduler')


class MaintenanceScheduler:
    """
    Runs cleanup of unused containers, images, volumes and networks on an interval.
    """
    def __init__(self, controller: ServiceController, interval: float = 86400.0):
        """
        Initialize the maintenance scheduler.

        Args:
            controller: The service controller used to reach the runtime
            interval: Seconds between two cleanup runs
        """
        if interval <= 0:
            raise ValueError("Maintenance interval must be positive")

        self.controller = controller
        self.interval = interval
        self.running = False
        self.thread = None
        self.last_run: Optional[float] = None
        self.last_outcomes: List[ServiceOutcome] = []
        self._stop_event: Optional[threading.Event] = None
        self._run_lock = threading.Lock()

    def start(self) -> bool:
        """Start the scheduler. Returns False if it was already running."""
        if self.running:
            return False

        self.running = True
        # One event per loop: a loop left over from an earlier start() stays stopped
        self._stop_event = threading.Event()
        self.thread = threading.Thread(target=self._scheduler_loop, args=(self._stop_event,), daemon=True)
        self.thread.start()
        logger.info(f"Maintenance scheduler started (every {self.interval:.0f}s)")
        return True

    def stop(self) -> bool:
        """Stop the scheduler. Returns False if it was not running."""
        if not self.running:
            return False

        self.running = False
        if self._stop_event:
            self._stop_event.set()
            self._stop_event = None
        if self.thread:
            self.thread.join(timeout=10)
            self.thread = None

        logger.info("Maintenance scheduler stopped")
        return True

    def run_once(self) -> List[ServiceOutcome]:
        """Run one cleanup pass now and remember its results."""
        with self._run_lock:
            outcomes = system.cleanup(self.controller)
            self.last_run = time.time()
            self.last_outcomes = outcomes

        failed = [o for o in outcomes if not o.success]
        if failed:
            logger.warning(f"Maintenance run finished with {len(failed)} failed step(s)")
        else:
            logger.info("Maintenance run finished")
        return outcomes

    @property
    def next_run(self) -> Optional[float]:
        if not self.running or self.last_run is None:
            return None
        return self.last_run + self.interval

    def _scheduler_loop(self, stop_event: threading.Event):
        """Main scheduler loop; runs until its own stop event is set."""
        while not stop_event.is_set():
            try:
                self.run_once()
            except Exception as e:
                logger.error(f"Error in maintenance loop: {str(e)}")

            # Sleep for the interval, waking early on stop()
            stop_event.wait(self.interval)
