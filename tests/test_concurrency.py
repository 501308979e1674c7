import anyio
import pytest

from strata.concurrency import gather


@pytest.mark.anyio
async def test_results_in_call_order():
    async def value(v, delay):
        await anyio.sleep(delay)
        return v

    assert await gather(value("a", 0.02), value("b", 0)) == ["a", "b"]


@pytest.mark.anyio
async def test_error_waits_for_peers_and_is_not_wrapped():
    finished = []

    async def slow():
        await anyio.sleep(0.01)
        finished.append("slow")
        return "slow"

    async def boom():
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        await gather(slow(), boom())
    assert finished == ["slow"]


@pytest.mark.anyio
async def test_return_exceptions_keeps_errors_in_place():
    async def ok():
        return 1

    async def boom():
        raise KeyError("k")

    results = await gather(ok(), boom(), return_exceptions=True)
    assert results[0] == 1
    assert isinstance(results[1], KeyError)


@pytest.mark.anyio
async def test_empty():
    assert await gather() == []
