"""Planification adossée à la boucle principale Tkinter.

Tkinter n'est pas sûr entre threads : les threads de travail ne touchent
jamais aux widgets. Ils déposent leurs résultats dans une file que la boucle
principale vide à intervalle court.
"""

from __future__ import annotations

import logging
import queue
import tkinter as tk
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DRAIN_INTERVAL_MS = 50
MAX_WORKERS = 4


class TkRepeatingTask:
    """Tâche réarmée via ``after`` tant qu'elle n'est pas annulée."""

    def __init__(self, widget: tk.Misc, interval_ms: int, callback: Callable[[], None]) -> None:
        self._widget = widget
        self._interval_ms = interval_ms
        self._callback = callback
        self._after_id: str | None = None
        self._cancelled = False
        self._arm()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _arm(self) -> None:
        self._after_id = self._widget.after(self._interval_ms, self._run)

    def _run(self) -> None:
        self._after_id = None
        if self._cancelled:
            return
        try:
            self._callback()
        finally:
            if not self._cancelled:
                self._arm()

    def cancel(self) -> None:
        self._cancelled = True
        if self._after_id:
            try:
                self._widget.after_cancel(self._after_id)
            except (ValueError, tk.TclError):
                logger.debug("Tâche déjà détruite : %s", self._after_id)
            self._after_id = None


class TkScheduler:
    def __init__(self, widget: tk.Misc) -> None:
        self._widget = widget

    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> TkRepeatingTask:
        return TkRepeatingTask(self._widget, interval_ms, callback)


class TkDispatcher:
    """Exécute les appels bloquants dans un pool de threads.

    Les rappels ``on_done`` et ceux de ``call_soon`` sont exécutés sur le
    thread Tk, dans l'ordre où ils ont été déposés.
    """

    def __init__(
        self,
        widget: tk.Misc,
        *,
        max_workers: int = MAX_WORKERS,
        drain_interval_ms: int = DRAIN_INTERVAL_MS,
    ) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="cyclechat"
        )
        self._pending: queue.Queue[Callable[[], None]] = queue.Queue()
        self._closed = False
        self._drain_task = TkRepeatingTask(widget, drain_interval_ms, self.drain)

    def submit(self, call: Callable[[], T], on_done: Callable[[Future[T]], None]) -> None:
        if self._closed:
            logger.debug("Appel ignoré : répartiteur arrêté.")
            return
        future = self._executor.submit(call)
        future.add_done_callback(lambda done: self._pending.put(partial(on_done, done)))

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._pending.put(callback)

    def drain(self) -> None:
        """Exécute les rappels en attente ; appelé sur le thread Tk."""
        while True:
            try:
                callback = self._pending.get_nowait()
            except queue.Empty:
                return
            try:
                callback()
            except Exception:
                logger.exception("Erreur dans un rappel de l'interface")

    def shutdown(self, *, wait: bool = False) -> None:
        self._closed = True
        self._drain_task.cancel()
        self._executor.shutdown(wait=wait, cancel_futures=True)
