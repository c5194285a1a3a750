# coordinator.py
from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

from . import settings
from .errors import PipelineError
from .example import EXAMPLE_WORKFLOW
from .pipeline import EMPTY, PipelineState, failed_state, run_pipeline
from .store import MemorySourceStore, SourceStore
from .ui.console import get_console


Listener = Callable[[PipelineState], None]


class PipelineCoordinator:
    """
    Debounced, single-flight driver of the workflow pipeline.

    submit(text) -> cancel pending timer -> schedule one run after the quiet
    period -> run synchronously -> publish the new state to listeners.

    Only one timer is ever pending and it always carries the most recently
    submitted text. The run itself never awaits, so two runs cannot overlap
    on the loop.
    """

    def __init__(
        self,
        store: Optional[SourceStore] = None,
        *,
        debounce_seconds: float = settings.DEBOUNCE_SECONDS,
        retain_last_success: bool = settings.RETAIN_LAST_SUCCESS,
        run: Callable[[Optional[str]], PipelineState] = run_pipeline,
    ):
        self.store: SourceStore = store if store is not None else MemorySourceStore()
        self.debounce_seconds = debounce_seconds
        self.retain_last_success = retain_last_success
        self._run = run

        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending_text: Optional[str] = None
        self._state: PipelineState = EMPTY
        self._listeners: List[Listener] = []
        self._closed = False

        self.source: Optional[str] = None  # last submitted text
        self.run_count = 0

    # ---- observation ----

    @property
    def current_result(self) -> PipelineState:
        return self._state

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with every published state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- input ----

    async def start(self) -> str:
        """Load the stored text once (or the built-in example) and submit it."""
        text = await self.store.load()
        if text is None:
            get_console().print_debug("store empty, using built-in example workflow")
            text = EXAMPLE_WORKFLOW
        await self.submit(text)
        return text

    async def submit(self, text: str) -> None:
        if self._closed:
            raise RuntimeError("PipelineCoordinator is closed")

        # schedule before awaiting the store so a later submit always wins
        self._schedule(text)
        await self.store.save(text)

    def close(self) -> None:
        """Cancel any pending run; no timer fires after this."""
        self._cancel_timer()
        self._pending_text = None
        self._closed = True

    # ---- execution ----

    def run_now(self, text: Optional[str]) -> PipelineState:
        """Run the pipeline on `text` immediately and publish the outcome."""
        self.run_count += 1
        try:
            state = self._run(text)
        except PipelineError as e:
            get_console().print_debug(f"run {self.run_count} failed: {e.kind}")
            state = failed_state(e, text, self._state, self.retain_last_success)
        except Exception as e:
            # still publish: the run happened and its result must replace the old one
            get_console().print_exception(e)
            err = PipelineError(kind="InternalError", message=f"{type(e).__name__}: {e}")
            state = failed_state(err, text, self._state, self.retain_last_success)
        else:
            get_console().print_debug(f"run {self.run_count}: {state.status}")
        self._publish(state)
        return state

    def _schedule(self, text: str) -> None:
        loop = asyncio.get_running_loop()
        if self._cancel_timer():
            get_console().print_debug("debounce: pending run rescheduled")
        self.source = text
        self._pending_text = text
        self._timer = loop.call_later(self.debounce_seconds, self._fire)

    def _cancel_timer(self) -> bool:
        if self._timer is None:
            return False
        self._timer.cancel()
        self._timer = None
        return True

    def _fire(self) -> None:
        self._timer = None
        text, self._pending_text = self._pending_text, None
        self.run_now(text)

    def _publish(self, state: PipelineState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
