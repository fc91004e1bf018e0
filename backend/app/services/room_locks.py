"""
房间级互斥锁

同一房间的结账必须串行执行，不同房间互不影响。锁按房间主键区分（改房间号不影响），
等待超时则拒绝本次操作，由调用方重试。
"""
import threading
from contextlib import contextmanager
from typing import Dict, Optional

from app.core import config
from app.core.exceptions import ConcurrentCheckout

_registry_lock = threading.Lock()
_room_locks: Dict[int, threading.Lock] = {}


def _lock_for(room_id: int) -> threading.Lock:
    with _registry_lock:
        lock = _room_locks.get(room_id)
        if lock is None:
            lock = threading.Lock()
            _room_locks[room_id] = lock
        return lock


@contextmanager
def room_lock(room_id: int, room_number: str, timeout: Optional[float] = None):
    """持有指定房间的锁"""
    lock = _lock_for(room_id)
    wait = config.CHECKOUT_LOCK_TIMEOUT if timeout is None else timeout
    if not lock.acquire(timeout=wait):
        raise ConcurrentCheckout(room_number)
    try:
        yield
    finally:
        lock.release()


def forget_room(room_id: int) -> None:
    """房间删除后清理对应的锁"""
    with _registry_lock:
        _room_locks.pop(room_id, None)
