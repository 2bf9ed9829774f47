import logging
import time
from datetime import datetime, timezone
from typing import Callable

from feedback_digest.workers.run_worker import DigestRunWorker

logger = logging.getLogger(__name__)

def scheduled_run_id(moment: datetime) -> str:
    """One run id per UTC day, so repeated timer signals on a day reuse the same checkpoints."""
    return f"scheduled-{moment.astimezone(timezone.utc):%Y-%m-%d}"

class DigestScheduler:
    def __init__(self, run_worker: DigestRunWorker, interval_seconds: int = 24 * 3600,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
                 sleep: Callable[[float], None] = time.sleep):
        """Initialize the scheduler that queues a digest run every `interval_seconds`."""
        self.run_worker = run_worker
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.sleep = sleep

    def tick(self) -> str:
        """Queue the run for the current day and return its id."""
        run_id = scheduled_run_id(self.clock())
        self.run_worker.enqueue(run_id, trigger='scheduled')
        logger.info(f"[CRON] Started digest workflow: {run_id}")
        return run_id

    def run(self):
        """Main scheduler loop."""
        logger.info(f"Starting digest scheduler (every {self.interval_seconds}s)...")

        while True:
            try:
                self.tick()
                self.sleep(self.interval_seconds)
            except KeyboardInterrupt:
                logger.info("Stopping digest scheduler...")
                break
            except Exception as e:
                logger.error(f"Error in digest scheduler: {e}")
                self.sleep(self.interval_seconds)
