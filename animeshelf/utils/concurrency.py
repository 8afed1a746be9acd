"""Ordered fan-out/fan-in over a thread pool."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

from tqdm import tqdm

from ..exceptions import ProbeFailure

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class Outcome(Generic[R]):
    """Result slot for one item: either a value or the failure that replaced it."""

    value: R | None = None
    error: ProbeFailure | None = None


def run_ordered(
    fn: Callable[[T], R],
    items: Sequence[T],
    max_workers: int = 4,
    desc: str = "Processing",
    unit: str = "file",
    show_progress: bool = True,
) -> list[Outcome[R]]:
    """Apply fn to every item concurrently and return outcomes in input order.

    Each worker writes only to its own slot, so completion order never
    affects the returned order. ProbeFailure is captured per item; any other
    exception propagates once all submitted work has finished.
    """
    outcomes: list[Outcome[R]] = [Outcome() for _ in items]
    if not items:
        return outcomes

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(fn, item): idx for idx, item in enumerate(items)}

        for future in tqdm(
            as_completed(futures),
            total=len(items),
            desc=desc,
            unit=unit,
            disable=not show_progress,
        ):
            idx = futures[future]
            try:
                outcomes[idx].value = future.result()
            except ProbeFailure as e:
                outcomes[idx].error = e

    return outcomes
