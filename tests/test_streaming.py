import asyncio

import pytest

from app.services.streaming import (
    StreamClosedError,
    Step,
    StreamingResponder,
    collect,
    text_prefixes,
)


def _drain(responder):
    async def go():
        return [event async for event in responder.stream()]
    return asyncio.run(go())


def _after(delay, value):
    async def run():
        await asyncio.sleep(delay)
        return value
    return run


def _boom(delay=0.0):
    async def run():
        await asyncio.sleep(delay)
        raise RuntimeError("upstream exploded")
    return run


def test_text_prefixes_grow_to_full_text():
    assert list(text_prefixes("abc")) == ["a", "ab", "abc"]
    assert list(text_prefixes("")) == [""]


def test_text_step_streams_monotonic_prefixes():
    events = _drain(StreamingResponder([Step("immediate", _after(0, "Hi there"), text=True)], char_delay=0))
    chunks = [e["data"] for e in events if e["type"] == "immediate"]
    assert chunks[-1] == "Hi there"
    for shorter, longer in zip(chunks, chunks[1:]):
        assert longer.startswith(shorter) and len(longer) > len(shorter)
    assert events[-1] == {"type": "complete"}


def test_steps_are_emitted_in_completion_order():
    responder = StreamingResponder(
        [Step("slow", _after(0.05, 1)), Step("fast", _after(0.0, 2))],
        char_delay=0,
    )
    events = _drain(responder)
    assert [e["type"] for e in events] == ["fast", "slow", "complete"]
    assert events[0]["data"] == 2


def test_failing_step_ends_stream_with_error():
    responder = StreamingResponder(
        [Step("ok", _after(0.0, "x")), Step("bad", _boom(0.01)), Step("late", _after(0.2, "never"))],
        char_delay=0,
    )
    events = _drain(responder)
    types = [e["type"] for e in events]
    assert types == ["ok", "error"]
    assert "bad" in events[-1]["message"]
    assert "upstream exploded" in events[-1]["message"]
    assert responder.closed


def test_emitting_after_close_raises():
    responder = StreamingResponder([Step("a", _after(0, 1))], char_delay=0)
    _drain(responder)
    with pytest.raises(StreamClosedError):
        responder._event("a", data=2)


def test_responder_is_single_use():
    responder = StreamingResponder([Step("a", _after(0, 1))], char_delay=0)
    _drain(responder)
    with pytest.raises(StreamClosedError):
        _drain(responder)


def test_reserved_and_duplicate_names_rejected():
    with pytest.raises(ValueError):
        StreamingResponder([Step("complete", _after(0, 1))])
    with pytest.raises(ValueError):
        StreamingResponder([Step("a", _after(0, 1)), Step("a", _after(0, 2))])


def test_abandoned_stream_cancels_pending_steps():
    finished = []

    async def slow():
        await asyncio.sleep(0.5)
        finished.append(True)
        return "late"

    async def go():
        responder = StreamingResponder([Step("fast", _after(0, 1)), Step("slow", slow)], char_delay=0)
        gen = responder.stream()
        first = await gen.__anext__()
        await gen.aclose()
        await asyncio.sleep(0.6)
        return first, responder.closed

    first, closed = asyncio.run(go())
    assert first == {"type": "fast", "data": 1}
    assert closed
    assert finished == []


def test_collect_keeps_final_values():
    responder = StreamingResponder(
        [Step("text", _after(0, "done"), text=True), Step("items", _after(0, [1, 2]))],
        char_delay=0,
    )
    assert asyncio.run(collect(responder)) == {"text": "done", "items": [1, 2]}


def test_collect_reports_error():
    out = asyncio.run(collect(StreamingResponder([Step("bad", _boom())], char_delay=0)))
    assert "error" in out and "bad" in out["error"]
