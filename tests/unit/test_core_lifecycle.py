import threading
import time

import pytest

from authbridge.core.exceptions import ConfigurationError
from authbridge.core.lifecycle import InitializableObject, LifecycleState


class CountingObject(InitializableObject):
    def __init__(self, delay: float = 0.0, fail_times: int = 0, error: Exception | None = None):
        super().__init__()
        self.calls = 0
        self.delay = delay
        self.fail_times = fail_times
        self.error = error or ConfigurationError("not ready")

    def internal_init(self):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.calls <= self.fail_times:
            raise self.error


def test_initializes_once():
    obj = CountingObject()
    assert obj.state is LifecycleState.UNINITIALIZED

    obj.ensure_initialized()
    obj.ensure_initialized()

    assert obj.calls == 1
    assert obj.initialized
    assert obj.state is LifecycleState.READY


def test_concurrent_callers_run_setup_once():
    obj = CountingObject(delay=0.05)
    barrier = threading.Barrier(16)
    states = []

    def worker():
        barrier.wait()
        obj.ensure_initialized()
        states.append(obj.state)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert obj.calls == 1
    assert states == [LifecycleState.READY] * 16


def test_force_reinitialize_reruns_setup():
    obj = CountingObject()
    obj.ensure_initialized()

    obj.force_reinitialize()

    assert obj.calls == 2
    assert obj.initialized


def test_failed_setup_can_be_retried():
    obj = CountingObject(fail_times=1)

    with pytest.raises(ConfigurationError, match="not ready"):
        obj.ensure_initialized()
    assert obj.state is LifecycleState.UNINITIALIZED

    obj.ensure_initialized()
    assert obj.calls == 2
    assert obj.initialized


def test_unexpected_setup_error_is_wrapped():
    obj = CountingObject(fail_times=1, error=KeyError("missing"))

    with pytest.raises(ConfigurationError) as excinfo:
        obj.ensure_initialized()

    assert isinstance(excinfo.value.__cause__, KeyError)
    assert "CountingObject" in excinfo.value.message
    assert not obj.initialized


def test_reinitialization_never_overlaps_setup():
    class OverlapTracker(InitializableObject):
        def __init__(self):
            super().__init__()
            self.active = 0
            self.max_active = 0
            self.calls = 0
            self._counter_lock = threading.Lock()

        def internal_init(self):
            with self._counter_lock:
                self.active += 1
                self.calls += 1
                self.max_active = max(self.max_active, self.active)
            time.sleep(0.005)
            with self._counter_lock:
                self.active -= 1

    obj = OverlapTracker()
    barrier = threading.Barrier(12)

    def reinitializer():
        barrier.wait()
        for _ in range(5):
            obj.force_reinitialize()

    def initializer():
        barrier.wait()
        for _ in range(20):
            obj.ensure_initialized()

    threads = [threading.Thread(target=reinitializer) for _ in range(4)]
    threads += [threading.Thread(target=initializer) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert obj.max_active == 1
    assert obj.calls in (20, 21)
    assert obj.initialized
