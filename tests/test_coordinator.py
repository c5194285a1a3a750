import asyncio

import pytest

from actiongraph.coordinator import PipelineCoordinator
from actiongraph.example import EXAMPLE_WORKFLOW
from actiongraph.pipeline import STATUS_EMPTY, STATUS_ERROR, STATUS_OK, run_pipeline
from actiongraph.store import MemorySourceStore

QUIET = 0.05
SETTLE = 0.25

VALID = "on: push\njobs:\n  build:\n    steps:\n      - run: make\n"
CYCLE = "on: push\njobs:\n  a:\n    needs: b\n  b:\n    needs: a\n"


def single_job(job_id):
    return f"on: push\njobs:\n  {job_id}:\n    steps:\n      - run: echo {job_id}\n"


@pytest.mark.asyncio
async def test_starts_empty():
    c = PipelineCoordinator(debounce_seconds=QUIET)
    assert c.current_result.status == STATUS_EMPTY
    assert not c.pending


@pytest.mark.asyncio
async def test_rapid_submissions_run_once_on_last_text():
    published = []
    c = PipelineCoordinator(MemorySourceStore(), debounce_seconds=QUIET)
    c.subscribe(published.append)

    for i in range(5):
        await c.submit(single_job(f"job{i}"))
    assert c.pending
    assert c.run_count == 0

    await asyncio.sleep(SETTLE)

    assert c.run_count == 1
    assert len(published) == 1
    assert published[0].status == STATUS_OK
    assert published[0].workflow.job_ids == ("job4",)
    assert c.current_result is published[0]


@pytest.mark.asyncio
async def test_separate_quiet_periods_run_separately():
    c = PipelineCoordinator(debounce_seconds=QUIET)
    await c.submit(single_job("one"))
    await asyncio.sleep(SETTLE)
    await c.submit(single_job("two"))
    await asyncio.sleep(SETTLE)
    assert c.run_count == 2
    assert c.current_result.workflow.job_ids == ("two",)


@pytest.mark.asyncio
async def test_every_submission_is_saved():
    store = MemorySourceStore()
    c = PipelineCoordinator(store, debounce_seconds=QUIET)
    await c.submit(VALID)
    await c.submit(CYCLE)
    assert store.saves == 2
    assert store.text == CYCLE
    assert c.source == CYCLE
    c.close()


@pytest.mark.asyncio
async def test_failure_replaces_previous_result():
    c = PipelineCoordinator(debounce_seconds=QUIET)
    await c.submit(VALID)
    await asyncio.sleep(SETTLE)
    assert c.current_result.status == STATUS_OK

    await c.submit(CYCLE)
    await asyncio.sleep(SETTLE)
    state = c.current_result
    assert state.status == STATUS_ERROR
    assert state.error.kind == "CycleDetected"
    assert state.layout is None

    # recovers on the next good submission
    await c.submit(VALID)
    await asyncio.sleep(SETTLE)
    assert c.current_result.status == STATUS_OK


@pytest.mark.asyncio
async def test_failure_keeps_previous_layout_when_asked():
    c = PipelineCoordinator(debounce_seconds=QUIET, retain_last_success=True)
    await c.submit(VALID)
    await asyncio.sleep(SETTLE)
    good = c.current_result

    await c.submit(CYCLE)
    await asyncio.sleep(SETTLE)
    state = c.current_result
    assert state.status == STATUS_ERROR
    assert state.layout is good.layout
    assert state.workflow is good.workflow


@pytest.mark.asyncio
async def test_close_cancels_pending_run():
    c = PipelineCoordinator(debounce_seconds=QUIET)
    await c.submit(VALID)
    c.close()
    await asyncio.sleep(SETTLE)
    assert c.run_count == 0
    assert c.current_result.status == STATUS_EMPTY
    with pytest.raises(RuntimeError):
        await c.submit(VALID)


@pytest.mark.asyncio
async def test_start_uses_example_when_store_is_empty():
    store = MemorySourceStore()
    c = PipelineCoordinator(store, debounce_seconds=QUIET)
    text = await c.start()
    assert text == EXAMPLE_WORKFLOW
    await asyncio.sleep(SETTLE)
    assert c.current_result.status == STATUS_OK
    assert store.text == EXAMPLE_WORKFLOW


@pytest.mark.asyncio
async def test_start_uses_stored_text():
    c = PipelineCoordinator(MemorySourceStore(VALID), debounce_seconds=QUIET)
    assert await c.start() == VALID
    await asyncio.sleep(SETTLE)
    assert c.current_result.workflow.job_ids == ("build",)


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    published = []
    c = PipelineCoordinator(debounce_seconds=QUIET)
    unsubscribe = c.subscribe(published.append)
    unsubscribe()
    await c.submit(VALID)
    await asyncio.sleep(SETTLE)
    assert published == []
    assert c.run_count == 1


def test_run_now_is_synchronous():
    c = PipelineCoordinator()
    state = c.run_now(VALID)
    assert state.status == STATUS_OK
    assert c.current_result is state
    assert c.run_count == 1


def _flaky(fail_on):
    def run(text):
        if text == fail_on:
            raise RuntimeError("layout blew up")
        return run_pipeline(text)
    return run


@pytest.mark.asyncio
async def test_unexpected_exception_is_published_as_error():
    published = []
    c = PipelineCoordinator(debounce_seconds=QUIET, run=_flaky(CYCLE))
    c.subscribe(published.append)

    await c.submit(VALID)
    await asyncio.sleep(SETTLE)
    assert c.current_result.status == STATUS_OK

    await c.submit(CYCLE)
    await asyncio.sleep(SETTLE)
    state = c.current_result
    assert [s.status for s in published] == [STATUS_OK, STATUS_ERROR]
    assert state.error.kind == "InternalError"
    assert "RuntimeError: layout blew up" in state.error.message
    assert state.layout is None
    assert not c.pending

    # the coordinator keeps working afterwards
    await c.submit(VALID)
    await asyncio.sleep(SETTLE)
    assert c.current_result.status == STATUS_OK
    assert c.run_count == 3


def test_run_now_publishes_unexpected_exception():
    c = PipelineCoordinator(run=_flaky(VALID))
    state = c.run_now(VALID)
    assert state.status == STATUS_ERROR
    assert state.error.kind == "InternalError"
    assert c.current_result is state
    assert state.to_dict()["error"]["kind"] == "InternalError"
