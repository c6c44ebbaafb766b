# icon_scout/chain.py
"""
"First success" combinator shared by the fetcher and the resolution pipeline.

Attempts are ``(label, thunk)`` pairs; thunks are awaited one at a time, in
order, and the first one that returns without a *recoverable* exception wins.
The result is a tagged :data:`Outcome` instead of a bare value, so callers can
tell which attempt produced it and why the earlier ones were skipped.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import (
    AsyncIterable,
    AsyncGenerator,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from icon_scout.logger import logger

T = TypeVar("T")

Attempt = Tuple[str, Callable[[], Awaitable[T]]]
Failure = Tuple[str, BaseException]

__all__ = ("Success", "Exhausted", "Outcome", "first_success")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T
    label: str
    failures: Tuple[Failure, ...] = ()

    ok = True


@dataclass(frozen=True, slots=True)
class Exhausted:
    failures: Tuple[Failure, ...] = ()

    ok = False

    def reasons(self) -> Tuple[str, ...]:
        return tuple(f"{label}: {exc}" for label, exc in self.failures)


Outcome = Union[Success[T], Exhausted]


async def _iterate(attempts: Union[Iterable[Attempt], AsyncIterable[Attempt]]) -> AsyncGenerator[Attempt, None]:
    if hasattr(attempts, "__aiter__"):
        try:
            async for item in attempts:  # type: ignore[union-attr]
                yield item
        finally:
            aclose = getattr(attempts, "aclose", None)
            if aclose is not None:
                await aclose()
    else:
        for item in attempts:
            yield item


async def first_success(
    attempts: Union[Iterable[Attempt], AsyncIterable[Attempt]],
    *,
    recoverable: Tuple[Type[BaseException], ...],
) -> Outcome:
    """Await *attempts* in order and return the first value that did not fail.

    Exceptions outside *recoverable* propagate unchanged.
    """
    failures: list[Failure] = []
    iterator = _iterate(attempts)
    try:
        async for label, thunk in iterator:
            try:
                value = await thunk()
            except recoverable as exc:
                logger.debug("Attempt %s failed: %s", label, exc)
                failures.append((label, exc))
                continue
            return Success(value=value, label=label, failures=tuple(failures))
    finally:
        await iterator.aclose()
    return Exhausted(failures=tuple(failures))
