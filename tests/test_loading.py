"""
Tests for single-flight loading.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from remark_sentiment.errors import LoadError, LoadTimeoutError
from remark_sentiment.loading import LoadOnce, LoadState

from conftest import CountingLoader


class TestLoadOnce:
    """Tests for LoadOnce lifecycle."""
    
    def test_initial_state(self):
        once = LoadOnce(CountingLoader("value"))
        assert once.state is LoadState.UNINITIALIZED
        assert once.value is None
    
    def test_first_get_performs_load(self):
        once = LoadOnce(CountingLoader("value"))
        assert once.get() == ("value", True)
        assert once.state is LoadState.READY
    
    def test_later_gets_reuse_value(self):
        loader = CountingLoader("value")
        once = LoadOnce(loader)
        once.get()
        
        assert once.get() == ("value", False)
        assert loader.calls == 1
    
    def test_failure_sets_failed_state(self):
        once = LoadOnce(CountingLoader("value", error=LoadError("boom")))
        with pytest.raises(LoadError, match="boom"):
            once.get()
        assert once.state is LoadState.FAILED
        assert once.value is None
    
    def test_retry_after_failure(self):
        loader = CountingLoader("value", error=LoadError("boom"))
        once = LoadOnce(loader)
        with pytest.raises(LoadError):
            once.get()
        
        loader.error = None
        assert once.get() == ("value", True)
        assert loader.calls == 2
    
    def test_concurrent_callers_share_one_load(self):
        gate = threading.Event()
        loader = CountingLoader("value", gate=gate)
        once = LoadOnce(loader)
        
        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(once.get) for _ in range(8)]
            time.sleep(0.2)
            assert once.state is LoadState.LOADING
            gate.set()
            results = [f.result(timeout=10) for f in futures]
        
        assert loader.calls == 1
        assert all(value == "value" for value, _ in results)
        assert sum(1 for _, performed in results if performed) == 1
    
    def test_concurrent_callers_share_failure(self):
        gate = threading.Event()
        loader = CountingLoader("value", gate=gate, error=LoadError("offline"))
        once = LoadOnce(loader)
        
        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(once.get) for _ in range(4)]
            time.sleep(0.2)
            gate.set()
            for future in futures:
                with pytest.raises(LoadError, match="offline"):
                    future.result(timeout=10)
        
        assert loader.calls == 1
    
    def test_waiter_timeout(self):
        gate = threading.Event()
        once = LoadOnce(CountingLoader("value", gate=gate), name="model")
        
        owner = threading.Thread(target=once.get)
        owner.start()
        try:
            time.sleep(0.1)
            with pytest.raises(LoadTimeoutError, match="model"):
                once.get(timeout=0.05)
        finally:
            gate.set()
            owner.join(timeout=10)
        
        assert once.state is LoadState.READY
