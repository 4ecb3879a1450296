"""
Event filters, listing and watching.

``list_events`` drains a finite, already fetched sequence of logs.
``watch_events`` blocks on a live subscription, racing three sources:
cancellation (SIGINT/SIGTERM), a subscription error and the next record.
"""

import queue
import signal
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Sequence

from scui import prompts
from scui.utils.colors import error
from scui.utils.exceptions import SubscriptionError, ValueCodecError, format_exception_message
from scui.utils.logging import get_logger
from .codec import decode, encode
from .schema import Argument, EventDescriptor

logger = get_logger('events')

# Longest time the watch loop waits for a record before re-checking the other sources
RACE_INTERVAL = 0.1


@dataclass
class FilterSlot:
    """Filter for one indexed argument; ``value`` None matches anything."""
    argument: Argument
    value: Any = None

    @property
    def match_any(self) -> bool:
        return self.value is None


@dataclass
class FilterSpec:
    """One slot per indexed event argument, in declaration order."""
    slots: List[FilterSlot]

    def argument_filters(self) -> Dict[str, Any]:
        return {s.argument.name: s.value for s in self.slots if not s.match_any}


def build_filter(inputs: Sequence[Argument]) -> FilterSpec:
    """
    Interactively build a filter over the indexed arguments of an event.

    Each indexed argument is offered for filtering; declining (or giving an
    empty value) leaves a match-any slot. Non-indexed arguments are never
    offered.

    Raises:
        AbortedError: If the operator cancels a prompt
    """
    slots = []
    for arg in inputs:
        if not arg.indexed:
            continue
        slot = FilterSlot(arg)
        slots.append(slot)
        question = f"field {arg.name} ({arg.type}) is indexed. filter?"
        if not prompts.input_yes_no(question, False):
            continue
        while True:
            text = prompts.input_text("field value (none): ")
            if text == "":
                break
            try:
                slot.value = encode(text, arg.type)
                break
            except ValueCodecError as e:
                print(f"{error(f'can not parse value: {e.message}')}")
    return FilterSpec(slots)


def format_event(event: EventDescriptor, record: Any) -> str:
    """Render one decoded log as ``  block N: name=value ...``."""
    args = record["args"]
    values = []
    for arg in event.inputs:
        try:
            values.append(f"{arg.name}={decode(args[arg.name], arg.type)}")
        except (KeyError, ValueCodecError) as e:
            # Report the field and keep rendering the rest
            print(error(f"can't render {arg.name}: {format_exception_message(e)}"))
    return f"  block {record['blockNumber']}: {' '.join(values)}"


def list_events(records: Iterable[Any], handle: Callable[[Any], None]) -> int:
    """
    Hand every already available record to ``handle`` and return.

    Returns:
        Number of records processed
    """
    count = 0
    for record in records:
        handle(record)
        count += 1
    return count


def watch_events(subscription, cancelled: threading.Event,
                 handle: Callable[[Any], None], race_interval: float = RACE_INTERVAL) -> int:
    """
    Process live records until cancellation or a subscription error.

    ``subscription`` needs ``records`` and ``errors`` queues and an
    ``unsubscribe()`` method (see ``LogSubscription``); it is always
    unsubscribed on return.

    Returns:
        Number of records processed

    Raises:
        SubscriptionError: If the subscription reported an error
    """
    count = 0
    try:
        while not cancelled.is_set():
            try:
                failure = subscription.errors.get_nowait()
            except queue.Empty:
                pass
            else:
                raise SubscriptionError(format_exception_message(failure))
            try:
                record = subscription.records.get(timeout=race_interval)
            except queue.Empty:
                continue
            handle(record)
            count += 1
    finally:
        subscription.unsubscribe()
    logger.debug(f"Stopped watching after {count} records")
    return count


@contextmanager
def interrupt_signal() -> Iterator[threading.Event]:
    """
    Turn SIGINT/SIGTERM into a cancellation event for the duration of the block.

    The previous handlers are restored on exit.
    """
    cancelled = threading.Event()

    def _cancel(signum, frame):
        cancelled.set()

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, _cancel)
    try:
        yield cancelled
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

