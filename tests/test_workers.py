"""
Tests for the run queue worker, the scheduler and the Redis checkpoint store
"""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from feedback_digest.workers.checkpoints import RedisCheckpointStore
from feedback_digest.workers.run_worker import PROCESSING_QUEUE, RUN_QUEUE, DigestRunWorker
from feedback_digest.workers.scheduler import DigestScheduler, scheduled_run_id


def test_process_next_runs_queued_id(workflow, store, redis_client):
    store.add_feedback("Batch inserts timeout", "github")
    redis_client.blmove.return_value = b"queued-run"
    worker = DigestRunWorker(workflow, redis_client)

    result = worker.process_next()

    assert result.run_id == "queued-run"
    assert result.status == 'completed'
    redis_client.blmove.assert_called_once_with(RUN_QUEUE, PROCESSING_QUEUE, 1, "LEFT", "RIGHT")
    redis_client.lrem.assert_called_once_with(PROCESSING_QUEUE, 1, b"queued-run")


def test_process_next_idle_queue(workflow, redis_client):
    redis_client.blmove.return_value = None
    worker = DigestRunWorker(workflow, redis_client)

    assert worker.process_next() is None
    redis_client.lrem.assert_not_called()


def test_process_next_releases_id_when_run_raises(redis_client):
    workflow = MagicMock()
    workflow.run.side_effect = RuntimeError("boom")
    redis_client.blmove.return_value = b"run-x"
    worker = DigestRunWorker(workflow, redis_client)

    with pytest.raises(RuntimeError):
        worker.process_next()

    redis_client.lrem.assert_called_once_with(PROCESSING_QUEUE, 1, b"run-x")


def test_enqueue_marks_run_queued(workflow, redis_client):
    worker = DigestRunWorker(workflow, redis_client)

    run_id = worker.enqueue(trigger='manual')

    redis_client.rpush.assert_called_once_with(RUN_QUEUE, run_id)
    assert workflow.get_status(run_id)['status'] == 'queued'


def test_recover_requeues_interrupted_runs(workflow, redis_client):
    redis_client.lmove.side_effect = [b"a", b"b", None]
    worker = DigestRunWorker(workflow, redis_client)

    assert worker.recover() == 2
    redis_client.lmove.assert_called_with(PROCESSING_QUEUE, RUN_QUEUE, "RIGHT", "LEFT")


def test_scheduled_run_id_is_per_day():
    morning = datetime(2024, 1, 21, 6, 0, tzinfo=timezone.utc)
    evening = datetime(2024, 1, 21, 22, 0, tzinfo=timezone.utc)
    assert scheduled_run_id(morning) == scheduled_run_id(evening) == "scheduled-2024-01-21"


def test_scheduler_tick_queues_daily_run(workflow, redis_client):
    worker = DigestRunWorker(workflow, redis_client)
    scheduler = DigestScheduler(
        worker,
        clock=lambda: datetime(2024, 1, 21, 6, 0, tzinfo=timezone.utc),
        sleep=lambda seconds: None
    )

    run_id = scheduler.tick()

    assert run_id == "scheduled-2024-01-21"
    redis_client.rpush.assert_called_once_with(RUN_QUEUE, run_id)
    assert workflow.get_status(run_id)['trigger'] == 'scheduled'


def test_same_day_schedule_does_not_duplicate_digest(workflow, store):
    store.add_feedback("Need read replicas", "github")
    run_id = scheduled_run_id(datetime(2024, 1, 21, tzinfo=timezone.utc))

    workflow.run(run_id, trigger='scheduled')
    workflow.run(run_id, trigger='scheduled')

    assert store.count_digests() == 1


def test_redis_checkpoint_store_round_trip():
    redis_client = MagicMock()
    checkpoints = RedisCheckpointStore(redis_client, ttl=60)

    checkpoints.save_step("r1", "fetch-feedback", [{"content": "hi", "source": None}])
    key, value = redis_client.set.call_args.args
    assert key == "digest:run:r1:step:fetch-feedback"
    assert redis_client.set.call_args.kwargs == {'ex': 60}

    redis_client.get.return_value = value.encode()
    assert checkpoints.load_step("r1", "fetch-feedback") == (True, [{"content": "hi", "source": None}])


def test_redis_checkpoint_store_missing_values():
    redis_client = MagicMock()
    redis_client.get.return_value = None
    checkpoints = RedisCheckpointStore(redis_client)

    assert checkpoints.load_step("r1", "store-digest") == (False, None)
    assert checkpoints.load_status("r1") is None


def test_redis_checkpoint_store_status():
    redis_client = MagicMock()
    checkpoints = RedisCheckpointStore(redis_client, ttl=30)

    checkpoints.save_status("r1", {"status": "running"})
    key, value = redis_client.set.call_args.args
    assert key == "digest:run:r1:status"
    assert json.loads(value) == {"status": "running"}
