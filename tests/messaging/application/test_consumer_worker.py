"""Consumer worker: ack-after-success, per-partition order, bounded redelivery."""

import json

import pytest
from shared.messaging.consumer import ConsumerWorker, Subscription
from shared.messaging.topics import dead_letter_topic


@pytest.fixture(autouse=True)
def _json_payloads(monkeypatch):
    monkeypatch.setattr("shared.messaging.consumer.decode", lambda contract, value: json.loads(value))


class Recorder:
    """Handler that fails on chosen values, ``times`` times or forever."""

    def __init__(self, fail_on=(), times=None):
        self.seen: list[int] = []
        self.fail_on = set(fail_on)
        self.times = times

    def __call__(self, payload):
        value = payload["n"]
        if value in self.fail_on and (self.times is None or self.times > 0):
            if self.times is not None:
                self.times -= 1
            raise RuntimeError(f"cannot handle {value}")
        self.seen.append(value)


def _worker(log, handler, max_retries=3):
    subscription = Subscription(topic="t", group="g", contract=dict, handler=handler)
    return ConsumerWorker(log, [subscription], max_retries=max_retries), subscription


def _publish(log, key, *values, topic="t"):
    for value in values:
        log.publish(topic, key, json.dumps({"n": value}))


class TestAcknowledgement:
    def test_handles_and_commits(self, log):
        handler = Recorder()
        worker, _ = _worker(log, handler)
        _publish(log, "k", 1, 2, 3)

        assert worker.poll() == 3
        assert handler.seen == [1, 2, 3]
        assert log.lag("g", "t") == 0

    def test_nothing_redelivered_after_success(self, log):
        handler = Recorder()
        worker, _ = _worker(log, handler)
        _publish(log, "k", 1)
        worker.poll()
        assert worker.poll() == 0
        assert handler.seen == [1]


class TestRedelivery:
    def test_failure_leaves_record_uncommitted(self, log):
        handler = Recorder(fail_on={2}, times=1)
        worker, subscription = _worker(log, handler)
        _publish(log, "k", 1, 2, 3)

        assert worker.poll() == 1
        assert handler.seen == [1]
        assert log.lag("g", "t") == 2
        assert worker.failures_for(subscription, log.records("t")[1]) == 1

    def test_partition_resumes_in_order(self, log):
        handler = Recorder(fail_on={2}, times=1)
        worker, subscription = _worker(log, handler)
        _publish(log, "k", 1, 2, 3)

        worker.poll()
        worker.poll()
        assert handler.seen == [1, 2, 3]
        assert log.lag("g", "t") == 0
        assert worker.failures_for(subscription, log.records("t")[1]) == 0

    def test_stuck_partition_does_not_block_other_topics(self, log):
        handler = Recorder(fail_on={1})
        worker, _ = _worker(log, handler, max_retries=10)
        other = Recorder()
        worker.subscriptions.append(Subscription(topic="u", group="g", contract=dict, handler=other))
        _publish(log, "a", 1)
        _publish(log, "b", 5, topic="u")

        worker.poll()
        assert handler.seen == []
        assert other.seen == [5]


class TestDeadLetter:
    def test_dead_lettered_after_max_retries(self, log):
        handler = Recorder(fail_on={2})
        worker, _ = _worker(log, handler, max_retries=3)
        _publish(log, "k", 1, 2, 3)

        for _ in range(3):
            worker.poll()

        assert handler.seen == [1, 3]
        [dead] = log.records(dead_letter_topic("t"))
        assert json.loads(dead.value) == {"n": 2}
        assert dead.key == "k"
        assert dead.headers["original_topic"] == "t"
        assert dead.headers["consumer_group"] == "g"
        assert dead.headers["attempts"] == "3"
        assert "RuntimeError" in dead.headers["error"]
        assert log.lag("g", "t") == 0

    def test_dead_letter_publish_failure_keeps_record(self, log):
        handler = Recorder(fail_on={1})
        worker, _ = _worker(log, handler, max_retries=1)
        _publish(log, "k", 1)
        log.configure(should_succeed=False)

        assert worker.poll() == 0
        assert log.lag("g", "t") == 1

        log.configure(should_succeed=True)
        assert worker.poll() == 1
        assert len(log.records(dead_letter_topic("t"))) == 1

    def test_drain_stops_when_idle(self, log):
        handler = Recorder(fail_on={2})
        worker, _ = _worker(log, handler, max_retries=2)
        _publish(log, "k", 1, 2, 3)

        worker.drain()
        assert handler.seen == [1, 3]
        assert len(log.records(dead_letter_topic("t"))) == 1


class TestRetryLimit:
    def test_environment_default(self, log, monkeypatch):
        monkeypatch.setenv("CONSUMER_MAX_RETRIES", "7")
        assert ConsumerWorker(log, []).max_retries == 7

    def test_explicit_zero_is_not_replaced_by_default(self, log, monkeypatch):
        monkeypatch.setenv("CONSUMER_MAX_RETRIES", "7")
        handler = Recorder(fail_on={1})
        worker, _ = _worker(log, handler, max_retries=0)
        assert worker.max_retries == 0

        _publish(log, "k", 1)
        assert worker.poll() == 1
        assert len(log.records(dead_letter_topic("t"))) == 1
