"""Per-token mutual exclusion for the admission commit.

Uses a Redis lock when a Redis connection is available so that several
worker processes agree; otherwise an in-process lock table.
"""
from contextlib import contextmanager
import hashlib
import logging
import threading

from redis.exceptions import LockError, RedisError

from ..errors import LockTimeout

logger = logging.getLogger(__name__)


def lock_key(token):
    return "admission:" + hashlib.sha256(token.encode("utf-8")).hexdigest()[:32]


class TokenLocks:
    def __init__(self, redis=None, timeout=10, wait=5):
        self.redis = redis
        self.timeout = timeout
        self.wait = wait
        self._guard = threading.Lock()
        self._local = {}
        self._users = {}

    @contextmanager
    def hold(self, token):
        key = lock_key(token)
        if self.redis is not None:
            try:
                lock = self.redis.lock(key, timeout=self.timeout, blocking_timeout=self.wait)
                acquired = lock.acquire()
            except RedisError:
                logger.exception("Redis lock unavailable, using in-process lock for %s", key)
            else:
                if not acquired:
                    raise LockTimeout(f"timed out waiting for {key}")
                try:
                    yield
                finally:
                    try:
                        lock.release()
                    except LockError:
                        # expired while held; the commit itself already ran
                        logger.warning("lock %s expired before release", key)
                return
        with self._local_lock(key):
            yield

    @contextmanager
    def _local_lock(self, key):
        with self._guard:
            lock = self._local.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            if not lock.acquire(timeout=self.wait):
                raise LockTimeout(f"timed out waiting for {key}")
            try:
                yield
            finally:
                lock.release()
        finally:
            with self._guard:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    self._local.pop(key, None)
