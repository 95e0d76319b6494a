"""Tests for the TTL cache, the circuit breaker and the event emitter."""

from services.cache import TTLCache
from services.circuit_breaker import CircuitBreaker
from services.events import EventEmitter, RecordingSink


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestTTLCache:
    def test_get_and_expiry_at_lookup(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.set("k", "v")
        assert cache.get("k") == "v"
        assert "k" in cache

        clock.now += 61
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_absolute_ttl_not_refreshed_by_reads(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.set("k", "v")
        clock.now += 40
        assert cache.get("k") == "v"
        clock.now += 40
        assert cache.get("k", "missing") == "missing"

    def test_falsy_values_are_cached(self):
        cache = TTLCache(60)
        cache.set("empty", [])
        assert "empty" in cache
        assert cache.get("empty", "missing") == []

    def test_clear(self):
        cache = TTLCache(60)
        cache.set("a", 1)
        cache.clear()
        assert len(cache) == 0


class TestCircuitBreaker:
    def test_opens_after_threshold_and_resets(self):
        clock = FakeClock()
        breaker = CircuitBreaker("test", threshold=3, reset_seconds=60, clock=clock)
        for _ in range(2):
            breaker.record_failure()
        assert breaker.is_closed()

        breaker.record_failure()
        assert not breaker.is_closed()

        clock.now += 61
        assert breaker.is_closed()
        assert breaker.failures == 0

    def test_success_resets_count(self):
        breaker = CircuitBreaker("test", threshold=2)
        breaker.record_failure()
        breaker.record_success()
        breaker.record_failure()
        assert breaker.is_closed()


class TestEvents:
    def test_recording_sink(self):
        sink = RecordingSink()
        emitter = EventEmitter(sinks=[sink])
        emitter.emit("ranking", kept=3)
        emitter.emit("ranking", kept=1)
        assert sink.names() == ["ranking", "ranking"]
        assert sink.find("ranking")[1] == {"kept": 1}

    def test_failing_sink_does_not_break_others(self):
        sink = RecordingSink()

        def broken(name, fields):
            raise RuntimeError("sink down")

        emitter = EventEmitter(sinks=[broken, sink])
        emitter.emit("discovery_level", level=1)
        assert sink.names() == ["discovery_level"]
