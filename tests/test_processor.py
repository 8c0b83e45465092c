"""Unit tests for the sequential queue processor - stub classifiers, no internet."""

import asyncio

import pytest

from conftest import GatedClassifier, StubClassifier, wait_until
from instacheck.core.processor import API_ERROR_NOTE, CancellationToken
from instacheck.models.record import CheckStatus, ClassificationResult, PageStatus
from instacheck.models.run import RunState


class TestQueueProcessorRun:
    """Test a full run over the eligible snapshot."""

    @pytest.mark.asyncio
    async def test_completed_result_is_merged(self, store, make_processor):
        store.add(["alice"])
        classifier = StubClassifier(results={
            "alice": ClassificationResult(
                page_status=PageStatus.OPEN,
                notes="found",
                profile_url="https://www.instagram.com/alice/",
            ),
        })

        summary = await make_processor(classifier).run()

        (record,) = store.list()
        assert record.check_status == CheckStatus.COMPLETED
        assert record.page_status == PageStatus.OPEN
        assert record.notes == "found"
        assert record.profile_url == "https://www.instagram.com/alice/"
        assert summary.completed == 1
        assert summary.stopped is False

    @pytest.mark.asyncio
    async def test_transport_error_marks_failed(self, store, make_processor):
        store.add(["alice", "bob", "carol"])
        classifier = StubClassifier(errors={"bob"})

        summary = await make_processor(classifier).run()

        statuses = {r.username: r for r in store.list()}
        assert statuses["bob"].check_status == CheckStatus.FAILED
        assert statuses["bob"].notes == API_ERROR_NOTE
        assert statuses["bob"].page_status == PageStatus.UNKNOWN
        # Run continues past the failure
        assert statuses["carol"].check_status == CheckStatus.COMPLETED
        assert summary.failed == 1
        assert summary.completed == 2

    @pytest.mark.asyncio
    async def test_unknown_result_is_completed_not_failed(self, store, make_processor):
        store.add(["alice"])
        classifier = StubClassifier(results={
            "alice": ClassificationResult(page_status=PageStatus.UNKNOWN, notes="No response from AI"),
        })

        await make_processor(classifier).run()

        (record,) = store.list()
        assert record.check_status == CheckStatus.COMPLETED
        assert record.page_status == PageStatus.UNKNOWN

    @pytest.mark.asyncio
    async def test_processes_in_insertion_order(self, store, make_processor):
        store.add(["c", "a", "b"])
        classifier = StubClassifier()

        await make_processor(classifier).run()

        assert classifier.calls == ["c", "a", "b"]

    @pytest.mark.asyncio
    async def test_failed_records_are_retried(self, store, make_processor):
        store.add(["alice", "bob"])
        classifier = StubClassifier(errors={"bob"})
        processor = make_processor(classifier)

        await processor.run()
        classifier.errors.clear()
        await processor.run()

        assert classifier.calls == ["alice", "bob", "bob"]
        assert all(r.check_status == CheckStatus.COMPLETED for r in store.list())

    @pytest.mark.asyncio
    async def test_completed_records_are_not_rechecked(self, store, make_processor):
        store.add(["alice"])
        classifier = StubClassifier()
        processor = make_processor(classifier)

        await processor.run()
        summary = await processor.run()

        assert classifier.calls == ["alice"]
        assert summary.attempted == 0

    @pytest.mark.asyncio
    async def test_records_outside_snapshot_untouched(self, store, make_processor):
        (done,) = store.add(["done"])
        store.update(done.id, check_status=CheckStatus.COMPLETED, page_status=PageStatus.OPEN)
        (busy,) = store.add(["busy"])
        store.update(busy.id, check_status=CheckStatus.PROCESSING)
        store.add(["fresh"])
        classifier = StubClassifier()

        await make_processor(classifier).run()

        assert classifier.calls == ["fresh"]
        assert store.get(done.id).page_status == PageStatus.OPEN
        assert store.get(busy.id).check_status == CheckStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_records_added_during_run_wait_for_next_run(self, store, make_processor):
        store.add(["alice", "bob"])
        classifier = StubClassifier(on_call=lambda u: store.add(["late"]) if u == "alice" else None)

        await make_processor(classifier).run()

        late = [r for r in store.list() if r.username == "late"]
        assert classifier.calls == ["alice", "bob"]
        assert late[0].check_status == CheckStatus.IDLE

    @pytest.mark.asyncio
    async def test_clear_during_run_is_safe(self, store, make_processor):
        store.add(["alice", "bob"])
        classifier = StubClassifier(on_call=lambda u: store.clear())

        await make_processor(classifier).run()

        assert store.list() == []

    @pytest.mark.asyncio
    async def test_marks_processing_while_in_flight(self, store, make_processor):
        (record,) = store.add(["alice"])
        classifier = GatedClassifier()
        gate = classifier.gate("alice")
        processor = make_processor(classifier)

        task = processor.start()
        await wait_until(lambda: classifier.calls)

        assert store.get(record.id).check_status == CheckStatus.PROCESSING
        gate.set()
        await task
        assert store.get(record.id).check_status == CheckStatus.COMPLETED


class TestQueueProcessorState:
    """Test run-level state and re-entrancy."""

    @pytest.mark.asyncio
    async def test_state_transitions(self, store, make_processor):
        store.add(["alice"])
        classifier = GatedClassifier()
        gate = classifier.gate("alice")
        processor = make_processor(classifier)

        assert processor.state == RunState.IDLE
        task = processor.start()
        assert processor.state == RunState.RUNNING
        assert processor.is_running is True

        gate.set()
        await task
        assert processor.state == RunState.IDLE

    @pytest.mark.asyncio
    async def test_start_while_running_is_noop(self, store, make_processor):
        store.add(["alice"])
        classifier = GatedClassifier()
        gate = classifier.gate("alice")
        processor = make_processor(classifier)

        first = processor.start()
        assert processor.start() is None
        assert await processor.run() is None

        gate.set()
        await first
        assert classifier.calls == ["alice"]

    @pytest.mark.asyncio
    async def test_empty_queue_run(self, make_processor):
        processor = make_processor(StubClassifier())
        summary = await processor.run()
        assert summary.attempted == 0
        assert processor.state == RunState.IDLE


class TestQueueProcessorStop:
    """Test cooperative cancellation."""

    @pytest.mark.asyncio
    async def test_stop_after_second_of_five(self, store, make_processor):
        records = store.add(["u1", "u2", "u3", "u4", "u5"])
        processor = None

        def stop_on_second(username):
            if username == "u2":
                processor.stop()

        classifier = StubClassifier(on_call=stop_on_second)
        processor = make_processor(classifier)

        summary = await processor.run()

        statuses = [store.get(r.id).check_status for r in records]
        assert statuses[:2] == [CheckStatus.COMPLETED, CheckStatus.COMPLETED]
        assert statuses[2:] == [CheckStatus.IDLE] * 3
        assert classifier.calls == ["u1", "u2"]
        assert summary.stopped is True

    @pytest.mark.asyncio
    async def test_stop_keeps_failed_records_failed(self, store, make_processor):
        records = store.add(["u1", "u2", "u3"])
        store.update(records[2].id, check_status=CheckStatus.FAILED, notes=API_ERROR_NOTE)
        processor = None
        classifier = StubClassifier(on_call=lambda u: processor.stop())
        processor = make_processor(classifier)

        await processor.run()

        assert store.get(records[0].id).check_status == CheckStatus.COMPLETED
        assert store.get(records[1].id).check_status == CheckStatus.IDLE
        assert store.get(records[2].id).check_status == CheckStatus.FAILED

    @pytest.mark.asyncio
    async def test_stop_flips_state_immediately(self, store, make_processor):
        (record,) = store.add(["alice"])
        classifier = GatedClassifier()
        gate = classifier.gate("alice")
        processor = make_processor(classifier)

        task = processor.start()
        await wait_until(lambda: classifier.calls)
        processor.stop()

        assert processor.state == RunState.IDLE
        # In-flight record still finishes
        gate.set()
        await task
        assert store.get(record.id).check_status == CheckStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_stop_skips_trailing_delay(self, store, make_processor):
        store.add(["alice", "bob"])
        processor = None
        classifier = StubClassifier(on_call=lambda u: processor.stop())
        processor = make_processor(classifier, delay_ms=60_000)

        summary = await asyncio.wait_for(processor.run(), timeout=5)

        assert summary.stopped is True
        assert classifier.calls == ["alice"]

    @pytest.mark.asyncio
    async def test_pacing_delay_between_records(self, store, make_processor):
        store.add(["alice", "bob"])
        processor = make_processor(StubClassifier(), delay_ms=50)

        summary = await processor.run()

        assert summary.duration_ms >= 90

    @pytest.mark.asyncio
    async def test_restart_after_stop_runs_remaining(self, store, make_processor):
        first, second = store.add(["alice", "bob"])
        classifier = GatedClassifier()
        gate_alice = classifier.gate("alice")
        gate_bob = classifier.gate("bob")
        processor = make_processor(classifier)

        old_task = processor.start()
        await wait_until(lambda: classifier.calls == ["alice"])
        processor.stop()

        # New run skips the in-flight record and picks up the rest
        new_task = processor.start()
        assert new_task is not None
        await wait_until(lambda: classifier.calls == ["alice", "bob"])

        # Finishing the superseded run must not reset the new run's state
        gate_alice.set()
        old_summary = await old_task
        assert old_summary.stopped is True
        assert processor.is_running is True

        gate_bob.set()
        await new_task
        assert processor.state == RunState.IDLE
        assert store.get(first.id).check_status == CheckStatus.COMPLETED
        assert store.get(second.id).check_status == CheckStatus.COMPLETED


class TestCancellationToken:
    """Test the per-run stop signal."""

    @pytest.mark.asyncio
    async def test_sleep_returns_early_when_cancelled(self):
        token = CancellationToken()
        loop = asyncio.get_running_loop()
        loop.call_later(0.01, token.cancel)

        await asyncio.wait_for(token.sleep(60), timeout=5)

        assert token.cancelled is True

    @pytest.mark.asyncio
    async def test_sleep_waits_full_interval(self):
        token = CancellationToken()
        loop = asyncio.get_running_loop()
        start = loop.time()

        await token.sleep(0.05)

        assert loop.time() - start >= 0.04
        assert token.cancelled is False
