from .checkpoints import RedisCheckpointStore, MemoryCheckpointStore
from .workflow import DigestWorkflow, RetryPolicy, RunResult
from .run_worker import DigestRunWorker
from .scheduler import DigestScheduler

__all__ = [
    'RedisCheckpointStore', 'MemoryCheckpointStore',
    'DigestWorkflow', 'RetryPolicy', 'RunResult',
    'DigestRunWorker', 'DigestScheduler'
]
