"""
Durable digest workflow.

A run is four named steps: fetch-feedback, analyze-with-ai, store-digest and
notify-slack. Each step's result is checkpointed under the run id, so running
the same id again resumes after the last completed step instead of redoing
it. A step that keeps failing is retried with exponential backoff until its
attempt budget is spent, then the run ends in the `failed` state with its
earlier checkpoints intact.
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from feedback_digest.digest.slack import format_slack_message
from feedback_digest.errors import StepFailed
from feedback_digest.store import DEFAULT_FEEDBACK_LIMIT

logger = logging.getLogger(__name__)

STEP_FETCH = 'fetch-feedback'
STEP_ANALYZE = 'analyze-with-ai'
STEP_STORE = 'store-digest'
STEP_NOTIFY = 'notify-slack'

STATUS_QUEUED = 'queued'
STATUS_RUNNING = 'running'
STATUS_SKIPPED = 'skipped'
STATUS_COMPLETED = 'completed'
STATUS_FAILED = 'failed'

NO_FEEDBACK_REASON = 'No feedback to analyze'


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    backoff_seconds: float = 2.0
    max_backoff_seconds: float = 60.0

    def delay(self, attempt: int) -> float:
        """Backoff before retrying after the given (1-based) failed attempt."""
        return min(self.max_backoff_seconds, self.backoff_seconds * (2 ** (attempt - 1)))


@dataclass
class RunResult:
    run_id: str
    status: str
    digest: Optional[Dict[str, Any]] = None
    digest_id: Optional[int] = None
    reason: Optional[str] = None
    failed_step: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def new_run_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DigestWorkflow:
    def __init__(self, store, builder, notifier, checkpoints,
                 retry_policy: Optional[RetryPolicy] = None,
                 feedback_limit: int = DEFAULT_FEEDBACK_LIMIT,
                 sleep: Callable[[float], None] = time.sleep):
        """Initialize the workflow with its collaborators.

        store: FeedbackStore-like (select_recent_feedback, insert_digest)
        builder: DigestBuilder-like (build)
        notifier: SlackNotifier-like (deliver)
        checkpoints: checkpoint store (load_step, save_step, load_status, save_status)
        """
        self.store = store
        self.builder = builder
        self.notifier = notifier
        self.checkpoints = checkpoints
        self.retry_policy = retry_policy or RetryPolicy()
        self.feedback_limit = feedback_limit
        self.sleep = sleep

    def mark_queued(self, run_id: str, trigger: str):
        """Record a run that has been handed to a queue but not started."""
        self.checkpoints.save_status(run_id, {
            'run_id': run_id,
            'status': STATUS_QUEUED,
            'trigger': trigger,
            'created_at': _now(),
            'updated_at': _now()
        })

    def get_status(self, run_id: str) -> Optional[Dict[str, Any]]:
        return self.checkpoints.load_status(run_id)

    def run(self, run_id: Optional[str] = None, trigger: str = 'manual') -> RunResult:
        """Execute (or resume) a run and return its terminal result."""
        run_id = run_id or new_run_id()
        record = self.checkpoints.load_status(run_id) or {
            'run_id': run_id,
            'trigger': trigger,
            'created_at': _now()
        }
        # drop failure details left by an earlier attempt of this run
        for key in ('error', 'failed_step', 'reason'):
            record.pop(key, None)
        self._set_status(run_id, record, status=STATUS_RUNNING, step=None)
        logger.info(f"Starting digest run {run_id} ({record.get('trigger', trigger)})")

        try:
            # an empty window is not checkpointed, so a replay of a skipped run fetches again
            feedback = self._step(run_id, record, STEP_FETCH, self._fetch, keep=bool)
            if not feedback:
                logger.info(f"Digest run {run_id} skipped: {NO_FEEDBACK_REASON}")
                self._set_status(run_id, record, status=STATUS_SKIPPED, step=None,
                                 reason=NO_FEEDBACK_REASON)
                return RunResult(run_id=run_id, status=STATUS_SKIPPED, reason=NO_FEEDBACK_REASON)

            digest = self._step(run_id, record, STEP_ANALYZE, lambda: self.builder.build(feedback))
            stored = self._step(run_id, record, STEP_STORE, lambda: self._store(digest, len(feedback)))
        except StepFailed as e:
            logger.error(f"Digest run {run_id} failed: {e}")
            self._set_status(run_id, record, status=STATUS_FAILED, step=e.step,
                             failed_step=e.step, error=str(e.cause))
            return RunResult(run_id=run_id, status=STATUS_FAILED,
                             failed_step=e.step, error=str(e.cause))

        # the digest is stored; notification failures never fail the run
        try:
            self._step(run_id, record, STEP_NOTIFY, lambda: self._notify(digest))
        except StepFailed as e:
            logger.error(f"Digest run {run_id}: notification gave up: {e}")

        self._set_status(run_id, record, status=STATUS_COMPLETED, step=None,
                         digest_id=stored['digest_id'])
        logger.info(f"Digest run {run_id} completed (digest {stored['digest_id']})")
        return RunResult(run_id=run_id, status=STATUS_COMPLETED,
                         digest=digest, digest_id=stored['digest_id'])

    def _fetch(self) -> List[Dict[str, Any]]:
        return self.store.select_recent_feedback(limit=self.feedback_limit)

    def _store(self, digest: Dict[str, Any], feedback_count: int) -> Dict[str, Any]:
        summary = json.dumps(digest, ensure_ascii=False)
        return {'digest_id': self.store.insert_digest(summary, feedback_count)}

    def _notify(self, digest: Dict[str, Any]) -> Dict[str, Any]:
        # delivery is best-effort: a failed post is logged by the notifier
        # and the step still completes
        return {'delivered': bool(self.notifier.deliver(format_slack_message(digest)))}

    def _step(self, run_id: str, record: Dict[str, Any], name: str, action: Callable[[], Any],
              keep: Optional[Callable[[Any], bool]] = None) -> Any:
        """Run one named step, or return its checkpointed result if it already ran.

        keep: optional predicate; a result it rejects is returned but not checkpointed
        """
        found, result = self.checkpoints.load_step(run_id, name)
        if found:
            logger.info(f"Run {run_id}: step '{name}' already checkpointed, skipping")
            return result

        self._set_status(run_id, record, step=name)
        attempts = max(1, self.retry_policy.max_attempts)
        for attempt in range(1, attempts + 1):
            try:
                result = action()
            except Exception as e:
                if attempt >= attempts:
                    raise StepFailed(name, attempt, e) from e
                delay = self.retry_policy.delay(attempt)
                logger.warning(
                    f"Run {run_id}: step '{name}' attempt {attempt}/{attempts} failed: {e}; "
                    f"retrying in {delay:.1f}s"
                )
                self.sleep(delay)
                continue

            if keep is None or keep(result):
                self.checkpoints.save_step(run_id, name, result)
            logger.info(f"Run {run_id}: step '{name}' completed")
            # same shape a resumed run reads back from the checkpoint
            return json.loads(json.dumps(result))

    def _set_status(self, run_id: str, record: Dict[str, Any], **changes):
        record.update(changes)
        record['updated_at'] = _now()
        self.checkpoints.save_status(run_id, record)
