import json
import threading
from typing import Any, Dict, Optional, Tuple
from redis import Redis

STEP_KEY = "digest:run:{run_id}:step:{step}"
STATUS_KEY = "digest:run:{run_id}:status"

class RedisCheckpointStore:
    """Step results and run status kept in Redis as JSON, expiring after `ttl` seconds."""

    def __init__(self, redis_client: Redis, ttl: int = 7 * 24 * 3600):
        self.redis_client = redis_client
        self.ttl = ttl

    def load_step(self, run_id: str, step: str) -> Tuple[bool, Any]:
        raw = self.redis_client.get(STEP_KEY.format(run_id=run_id, step=step))
        if raw is None:
            return False, None
        return True, json.loads(raw)

    def save_step(self, run_id: str, step: str, result: Any):
        self.redis_client.set(STEP_KEY.format(run_id=run_id, step=step), json.dumps(result), ex=self.ttl)

    def load_status(self, run_id: str) -> Optional[Dict[str, Any]]:
        raw = self.redis_client.get(STATUS_KEY.format(run_id=run_id))
        return json.loads(raw) if raw is not None else None

    def save_status(self, run_id: str, status: Dict[str, Any]):
        self.redis_client.set(STATUS_KEY.format(run_id=run_id), json.dumps(status), ex=self.ttl)

class MemoryCheckpointStore:
    """In-process checkpoint store for synchronous runs and tests.

    Values are stored JSON-encoded so a resumed step sees exactly what the
    Redis store would return.
    """

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def load_step(self, run_id: str, step: str) -> Tuple[bool, Any]:
        with self._lock:
            raw = self._data.get(STEP_KEY.format(run_id=run_id, step=step))
        if raw is None:
            return False, None
        return True, json.loads(raw)

    def save_step(self, run_id: str, step: str, result: Any):
        with self._lock:
            self._data[STEP_KEY.format(run_id=run_id, step=step)] = json.dumps(result)

    def load_status(self, run_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            raw = self._data.get(STATUS_KEY.format(run_id=run_id))
        return json.loads(raw) if raw is not None else None

    def save_status(self, run_id: str, status: Dict[str, Any]):
        with self._lock:
            self._data[STATUS_KEY.format(run_id=run_id)] = json.dumps(status)
