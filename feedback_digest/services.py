import logging
from dataclasses import dataclass
from redis import Redis

from feedback_digest.config import Config
from feedback_digest.digest.builder import DigestBuilder
from feedback_digest.digest.inference import WorkersAIClient
from feedback_digest.digest.prompts import get_template
from feedback_digest.digest.slack import SlackNotifier
from feedback_digest.models.database import create_session_factory, init_db
from feedback_digest.store import FeedbackStore
from feedback_digest.workers.checkpoints import RedisCheckpointStore
from feedback_digest.workers.run_worker import DigestRunWorker
from feedback_digest.workers.scheduler import DigestScheduler
from feedback_digest.workers.workflow import DigestWorkflow, RetryPolicy

logger = logging.getLogger(__name__)

@dataclass
class DigestServices:
    """Wired collaborators shared by the API and the background loops."""
    store: FeedbackStore
    workflow: DigestWorkflow
    run_worker: DigestRunWorker
    scheduler: DigestScheduler

def build_services(cfg: Config) -> DigestServices:
    """Wire the production collaborators from configuration."""
    session_factory = create_session_factory(cfg.DATABASE_URL)
    init_db(session_factory)
    redis_client = Redis.from_url(cfg.REDIS_URL)

    store = FeedbackStore(session_factory)
    inference = WorkersAIClient(
        cfg.CF_ACCOUNT_ID,
        cfg.CF_API_TOKEN,
        model=cfg.AI_MODEL,
        timeout=cfg.AI_TIMEOUT_SEC
    )
    builder = DigestBuilder(
        inference,
        template=get_template(cfg.DIGEST_PROMPT_VARIANT),
        product=cfg.DIGEST_PRODUCT_NAME
    )
    workflow = DigestWorkflow(
        store=store,
        builder=builder,
        notifier=SlackNotifier(cfg.SLACK_WEBHOOK_URL),
        checkpoints=RedisCheckpointStore(redis_client, ttl=cfg.CHECKPOINT_TTL_SEC),
        retry_policy=RetryPolicy(
            max_attempts=cfg.DIGEST_STEP_MAX_ATTEMPTS,
            backoff_seconds=cfg.DIGEST_STEP_BACKOFF_SEC,
            max_backoff_seconds=cfg.DIGEST_STEP_MAX_BACKOFF_SEC
        ),
        feedback_limit=cfg.DIGEST_FEEDBACK_LIMIT
    )
    run_worker = DigestRunWorker(workflow, redis_client)
    scheduler = DigestScheduler(run_worker, interval_seconds=cfg.DIGEST_SCHEDULE_INTERVAL_SEC)

    logger.info(f"Digest services ready (model {cfg.AI_MODEL}, prompt '{cfg.DIGEST_PROMPT_VARIANT}')")
    return DigestServices(store=store, workflow=workflow, run_worker=run_worker, scheduler=scheduler)
