import logging
from typing import Optional
from redis import Redis

from feedback_digest.workers.workflow import DigestWorkflow, RunResult, new_run_id

logger = logging.getLogger(__name__)

RUN_QUEUE = "digest:runs"
PROCESSING_QUEUE = "digest:runs:processing"

class DigestRunWorker:
    """Consumes queued run ids and executes them one at a time.

    A run id sits in the processing list while it executes, so a run that
    was interrupted by a crash is pushed back onto the queue by recover().
    """

    def __init__(self, workflow: DigestWorkflow, redis_client: Redis):
        self.workflow = workflow
        self.redis_client = redis_client

    def enqueue(self, run_id: Optional[str] = None, trigger: str = 'manual') -> str:
        """Queue a run and return its id."""
        run_id = run_id or new_run_id()
        self.workflow.mark_queued(run_id, trigger)
        self.redis_client.rpush(RUN_QUEUE, run_id)
        logger.info(f"Queued digest run {run_id} ({trigger})")
        return run_id

    def recover(self) -> int:
        """Move interrupted runs from the processing list back onto the queue."""
        recovered = 0
        while self.redis_client.lmove(PROCESSING_QUEUE, RUN_QUEUE, "RIGHT", "LEFT"):
            recovered += 1
        if recovered:
            logger.info(f"Recovered {recovered} interrupted digest run(s)")
        return recovered

    def process_next(self, timeout: int = 1) -> Optional[RunResult]:
        """Pop one run id (blocking up to `timeout` seconds) and execute it."""
        raw = self.redis_client.blmove(RUN_QUEUE, PROCESSING_QUEUE, timeout, "LEFT", "RIGHT")
        if raw is None:
            return None

        run_id = raw.decode() if isinstance(raw, bytes) else raw
        try:
            return self.workflow.run(run_id)
        finally:
            self.redis_client.lrem(PROCESSING_QUEUE, 1, raw)

    def run(self):
        """Main worker loop."""
        logger.info("Starting digest run worker...")
        self.recover()

        while True:
            try:
                self.process_next()
            except KeyboardInterrupt:
                logger.info("Stopping digest run worker...")
                break
            except Exception as e:
                logger.error(f"Error in digest run worker: {e}")
                continue
