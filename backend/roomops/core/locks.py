"""
按键加锁 - 同一房间的预订变更、同一服务单的开票串行执行

预订的冲突检查是"先读后写"，同一进程内并发审批同一房间会产生竞态，
所有改变预订状态的操作都在房间锁内完成。
"""
from contextlib import contextmanager
from typing import Dict, Iterator
import threading


class KeyedLocks:
    """每个键一把可重入锁，锁对象按需创建"""

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


# 房间锁（预订台账使用）
room_locks = KeyedLocks()

# 服务单锁（开票使用）
order_locks = KeyedLocks()
