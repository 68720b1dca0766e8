"""
Streams the results of concurrent, named steps as typed events.

Every step starts at once; each one's result is emitted as soon as it finishes, in completion order.
Text steps are replayed as growing prefixes with a small per-character delay so the UI can type them out.
The stream ends with exactly one terminal event: {"type": "complete"} or {"type": "error", "message": ...}.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

COMPLETE = "complete"
ERROR = "error"
RESERVED = frozenset({COMPLETE, ERROR})


class StreamClosedError(RuntimeError):
    """Raised when something tries to emit on a stream that already ended."""


@dataclass(frozen=True)
class Step:
    name: str
    run: Callable[[], Awaitable[Any]]
    text: bool = False


def text_prefixes(text: str) -> Iterator[str]:
    """Growing prefixes of `text`, ending with the full text. Empty text yields one empty chunk."""
    if not text:
        yield ""
        return
    for i in range(1, len(text) + 1):
        yield text[:i]


class StreamingResponder:
    def __init__(self, steps: Sequence[Step], *, char_delay: float = 0.02):
        names = [s.name for s in steps]
        if len(set(names)) != len(names):
            raise ValueError(f"step names must be unique: {names}")
        clash = RESERVED.intersection(names)
        if clash:
            raise ValueError(f"step names {sorted(clash)} are reserved for terminal events")
        self.steps: List[Step] = list(steps)
        self.char_delay = max(0.0, float(char_delay))
        self._started = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _event(self, type_: str, **payload: Any) -> Dict[str, Any]:
        if self._closed:
            raise StreamClosedError(f"cannot emit {type_!r}: stream already closed")
        return {"type": type_, **payload}

    def _terminal(self, type_: str, **payload: Any) -> Dict[str, Any]:
        event = self._event(type_, **payload)
        self._closed = True
        return event

    @staticmethod
    async def _run(step: Step) -> Tuple[Step, Any, Optional[BaseException]]:
        try:
            return step, await step.run(), None
        except Exception as exc:
            return step, None, exc

    async def stream(self) -> AsyncIterator[Dict[str, Any]]:
        if self._started:
            raise StreamClosedError("a StreamingResponder can only be streamed once")
        self._started = True

        tasks = [asyncio.ensure_future(self._run(step)) for step in self.steps]
        try:
            for next_done in asyncio.as_completed(tasks):
                step, value, error = await next_done
                if error is not None:
                    logger.warning("stream step %s failed: %s: %s", step.name, type(error).__name__, error)
                    yield self._terminal(ERROR, message=f"Could not finish '{step.name}': {error}")
                    return

                if step.text:
                    chunks = list(text_prefixes("" if value is None else str(value)))
                    for i, prefix in enumerate(chunks):
                        yield self._event(step.name, data=prefix)
                        if self.char_delay and i < len(chunks) - 1:
                            await asyncio.sleep(self.char_delay)
                else:
                    yield self._event(step.name, data=value)

            yield self._terminal(COMPLETE)
        finally:
            # consumer went away or a step failed: nothing left should keep running
            for task in tasks:
                if not task.done():
                    task.cancel()
            self._closed = True


async def collect(responder: StreamingResponder) -> Dict[str, Any]:
    """Drain a responder and return the final value per step, plus "error" if the stream failed."""
    out: Dict[str, Any] = {}
    async for event in responder.stream():
        kind = event["type"]
        if kind == ERROR:
            out[ERROR] = event.get("message")
        elif kind != COMPLETE:
            out[kind] = event.get("data")
    return out
