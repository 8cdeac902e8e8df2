from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Result of one fanned-out task: either a value or the error it raised."""

    label: str
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _run(label: str, awaitable: Awaitable[T], timeout: float | None) -> Outcome[T]:
    try:
        if timeout is not None and timeout > 0:
            value = await asyncio.wait_for(awaitable, timeout=timeout)
        else:
            value = await awaitable
    except asyncio.TimeoutError:
        return Outcome(label=label, error=TimeoutError(f"timed out after {timeout}s"))
    except Exception as exc:
        return Outcome(label=label, error=exc)
    return Outcome(label=label, value=value)


async def gather_outcomes(
    tasks: Sequence[tuple[str, Awaitable[T]]],
    *,
    timeout: float | None = None,
) -> list[Outcome[T]]:
    """Run labelled awaitables concurrently and collect one Outcome per task.

    Outcomes come back in input order. A failing or timed-out task never
    cancels its siblings and never raises here; callers apply their own
    degrade-or-propagate policy to the failed outcomes.
    """
    if not tasks:
        return []
    return list(
        await asyncio.gather(*(_run(label, aw, timeout) for label, aw in tasks))
    )
