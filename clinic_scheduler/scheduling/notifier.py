"""Broadcast delivery for appointment observers."""

import logging
from contextlib import contextmanager

from rich.console import Console

from clinic_scheduler.scheduling.channels import Sink, deliver
from clinic_scheduler.scheduling.database.records import IdKind, ObserverRef

logger = logging.getLogger(__name__)

_console = Console()


def console_sink(line: str) -> None:
    """Print a delivered notification on the terminal."""
    # markup off: the channel label looks like a rich tag
    _console.print(line, style="magenta", markup=False)


class Notifier:
    """Resolves observers through the store and delivers on their channel.

    Delivery never fails the caller: a broken sink is logged and the
    broadcast moves on to the next observer.
    """

    def __init__(self, store, sink: Sink | None = None):
        self.store = store
        self.sink = sink or console_sink
        self._pending: list[tuple] | None = None

    def notify(self, observer: ObserverRef, message: str) -> None:
        """Deliver a message to one observer on its selected channel."""
        if observer.kind == IdKind.PATIENT:
            user = self.store.get_patient(observer.id)
        elif observer.kind == IdKind.DOCTOR:
            user = self.store.get_doctor(observer.id)
        else:
            user = None

        if user is None:
            logger.warning("Dropping notification for unknown observer %s %s", observer.kind.name, observer.id)
            return

        delivery = (user.channel, user.contact_address(), message)
        if self._pending is not None:
            self._pending.append(delivery)
        else:
            self._deliver(*delivery)

    @contextmanager
    def deferred(self):
        """Hold deliveries until the block finishes; drop them if it raises."""
        if self._pending is not None:
            yield
            return

        self._pending = []
        try:
            yield
        except BaseException:
            dropped = len(self._pending)
            self._pending = None
            if dropped:
                logger.info("Dropped %d notification(s) after a failed operation", dropped)
            raise
        pending, self._pending = self._pending, None
        for delivery in pending:
            self._deliver(*delivery)

    def _deliver(self, channel, recipient: str, message: str) -> None:
        try:
            deliver(channel, recipient, message, self.sink)
        except Exception:
            logger.exception("Failed to deliver %s notification to %s", channel.label, recipient)
        else:
            logger.info("Delivered %s notification to %s", channel.label, recipient)
