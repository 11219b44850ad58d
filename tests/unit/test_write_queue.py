import pytest

from recipetrio.shared.persistence.write_queue import WriteQueue


@pytest.mark.asyncio
async def test_jobs_run_in_submission_order():
    done = []
    queue = WriteQueue(maxsize=10)

    assert queue.submit("one", done.append, 1) is True
    assert queue.submit("two", done.append, 2) is True
    await queue.join()

    assert done == [1, 2]
    assert queue.running
    await queue.stop()
    assert not queue.running


@pytest.mark.asyncio
async def test_failures_go_to_error_sink_and_worker_survives():
    errors = []
    done = []

    def boom():
        raise RuntimeError("mongo down")

    queue = WriteQueue(on_error=lambda job, exc: errors.append((job.label, str(exc))))
    queue.submit("bad", boom)
    queue.submit("good", done.append, "ok")
    await queue.join()
    await queue.stop()

    assert errors == [("bad", "mongo down")]
    assert done == ["ok"]


@pytest.mark.asyncio
async def test_full_queue_drops_without_raising():
    queue = WriteQueue(maxsize=1)

    assert queue.submit("first", lambda: None) is True
    assert queue.submit("second", lambda: None) is False
    await queue.stop()


def test_submit_outside_event_loop_is_rejected():
    assert WriteQueue().submit("orphan", lambda: None) is False


@pytest.mark.asyncio
async def test_queue_restarts_after_stop():
    done = []
    queue = WriteQueue()
    await queue.start()
    await queue.stop()

    queue.submit("again", done.append, 1)
    await queue.join()
    await queue.stop()
    assert done == [1]
