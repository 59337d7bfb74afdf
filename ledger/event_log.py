"""
Ledger event log

Append-only, ordered log of what the token ledger committed:
- Transfer(from, to, amount)  (construction credit, transfers, mint, burn)
- Approval(owner, spender, amount)

Events are only recorded after an operation has been applied, so a rejected
call never shows up here. Observers can subscribe to be told about each new
event in commit order.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional
import json
import threading
import time

TRANSFER = "Transfer"
APPROVAL = "Approval"


@dataclass(frozen=True)
class LedgerEvent:
    seq: int
    ts: float
    event_type: str
    amount: int
    indexed: Dict[str, str] = field(default_factory=dict)

    def involves(self, address: str) -> bool:
        return address in self.indexed.values()

    def to_dict(self) -> Dict[str, Any]:
        # amount as a string: 256-bit values do not survive JSON number parsing
        return {
            "seq": self.seq,
            "ts": self.ts,
            "event_type": self.event_type,
            "amount": str(self.amount),
            **self.indexed,
        }


Subscriber = Callable[[LedgerEvent], None]


class EventLog:
    """
    `record` appends and queues the event; `flush` hands queued events to
    subscribers. The ledger records while holding its own lock and flushes
    after releasing it. Only one thread drains the queue at a time, and a
    flush that arrives while draining (a subscriber writing back to the
    ledger, or another thread) leaves its events to the running drain, so
    every subscriber sees seq order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: List[LedgerEvent] = []
        self._pending: Deque[LedgerEvent] = deque()
        self._subscribers: List[Subscriber] = []
        self._draining = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def record(self, event_type: str, amount: int, **indexed: str) -> LedgerEvent:
        with self._lock:
            ev = LedgerEvent(
                seq=len(self._events) + 1,
                ts=time.time(),
                event_type=event_type,
                amount=amount,
                indexed=dict(indexed),
            )
            self._events.append(ev)
            self._pending.append(ev)
        print("[EventLog]", json.dumps(ev.to_dict(), default=str), flush=True)
        return ev

    def flush(self) -> None:
        with self._lock:
            if self._draining:
                return
            self._draining = True
        try:
            while True:
                with self._lock:
                    if not self._pending:
                        self._draining = False
                        return
                    ev = self._pending.popleft()
                self._notify(ev)
        except BaseException:
            with self._lock:
                self._draining = False
            raise

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register `callback` for every future event.
        Returns a function that removes the subscription again.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, ev: LedgerEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(ev)
            except Exception as e:
                # the event is already committed; a broken observer can't undo it
                print(f"[EventLog] subscriber {callback!r} failed on seq={ev.seq}: {e}", flush=True)

    def all_events(self) -> List[LedgerEvent]:
        with self._lock:
            return list(self._events)

    def filter(self, event_type: Optional[str] = None, address: Optional[str] = None) -> List[LedgerEvent]:
        out = self.all_events()
        if event_type:
            out = [e for e in out if e.event_type == event_type]
        if address:
            out = [e for e in out if e.involves(address)]
        return list(out)
