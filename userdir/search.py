"""Debounced "search by user id as you type" controller.

One controller per search field. Keystrokes go through ``on_input``;
valid ids are looked up once the input has been quiet for ``delay``
seconds. Every input bumps ``sequence``, and a lookup only applies its
outcome if the sequence it captured is still current, so a slow response
for an old query can never overwrite a newer one.

Runs on the asyncio event loop; handlers are never interleaved, so no
locking is needed.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Awaitable, Callable, List, Optional, Set

from userdir.config import Config
from userdir.models import SearchPhase, SearchState, User

logger = logging.getLogger(__name__)

USER_ID_PATTERN = re.compile(r"[0-9]+")

INVALID_ID_MESSAGE = "Please enter a numeric user ID"
NOT_FOUND_MESSAGE = "User not found. Please check the ID and try again."

Lookup = Callable[[int], Awaitable[User]]
Listener = Callable[[SearchState], None]


class SearchController:
    def __init__(
        self,
        lookup: Lookup,
        delay: float = Config.SEARCH_DEBOUNCE_SECONDS,
        on_select: Optional[Callable[[User], None]] = None,
    ):
        self._lookup = lookup
        self._delay = float(delay)
        self._on_select = on_select

        self._raw_input = ""
        self._is_valid = True
        self._phase = SearchPhase.IDLE
        self._result: Optional[User] = None
        self._error_message: Optional[str] = None
        self._sequence = 0

        self._timer: Optional[asyncio.TimerHandle] = None
        self._inflight: Set[asyncio.Task] = set()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def raw_input(self) -> str:
        return self._raw_input

    @property
    def is_valid(self) -> bool:
        return self._is_valid

    @property
    def phase(self) -> SearchPhase:
        return self._phase

    @property
    def result(self) -> Optional[User]:
        return self._result

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def sequence(self) -> int:
        return self._sequence

    def snapshot(self) -> SearchState:
        return SearchState(
            raw_input=self._raw_input,
            is_valid=self._is_valid,
            phase=self._phase,
            result=self._result,
            error_message=self._error_message,
            sequence=self._sequence,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Push a snapshot to ``listener`` after every state change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def on_input(self, raw: str) -> None:
        """Handle one raw input event from the search field."""
        self._raw_input = raw
        self._result = None
        self._error_message = None
        self._sequence += 1

        trimmed = raw.strip()

        if not trimmed:
            self._cancel_timer()
            self._is_valid = True
            self._phase = SearchPhase.IDLE
        elif not USER_ID_PATTERN.fullmatch(trimmed):
            self._cancel_timer()
            self._is_valid = False
            self._error_message = INVALID_ID_MESSAGE
            self._phase = SearchPhase.ERROR
        else:
            self._is_valid = True
            self._phase = SearchPhase.DEBOUNCING
            self._schedule(int(trimmed))

        self._notify()

    def clear(self) -> None:
        """Reset to idle from any phase and drop any pending lookup."""
        self._cancel_timer()
        self._reset()
        self._notify()

    def confirm_selection(self) -> Optional[User]:
        """Consume the found user and reset the field.

        Only valid while a user is found; returns None otherwise.
        """
        if self._phase is not SearchPhase.FOUND or self._result is None:
            return None

        user = self._result
        try:
            if self._on_select is not None:
                self._on_select(user)
        finally:
            self.clear()
        return user

    async def drain(self) -> None:
        """Wait until every lookup started so far has settled."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def close(self) -> None:
        """Cancel the pending timer and every in-flight lookup.

        A lookup that was still current settles the field into ERROR.
        """
        self._cancel_timer()
        for task in list(self._inflight):
            task.cancel()
        await self.drain()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self._raw_input = ""
        self._is_valid = True
        self._result = None
        self._error_message = None
        self._phase = SearchPhase.IDLE
        # In-flight lookups become stale
        self._sequence += 1

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, user_id: int) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._fire, user_id, self._sequence)

    def _fire(self, user_id: int, scheduled_sequence: int) -> None:
        self._timer = None
        if scheduled_sequence != self._sequence:
            return

        sequence = self._sequence
        self._phase = SearchPhase.SEARCHING
        self._notify()

        task = asyncio.ensure_future(self._run_lookup(user_id, sequence))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run_lookup(self, user_id: int, sequence: int) -> None:
        try:
            user = await self._lookup(user_id)
        except asyncio.CancelledError:
            if sequence == self._sequence:
                self._error_message = NOT_FOUND_MESSAGE
                self._phase = SearchPhase.ERROR
                self._notify()
            raise
        except Exception as exc:
            if sequence != self._sequence:
                logger.debug(f"Discarding stale lookup failure for user {user_id}")
                return
            logger.info(f"Search lookup for user {user_id} failed: {exc}")
            self._result = None
            self._error_message = NOT_FOUND_MESSAGE
            self._phase = SearchPhase.ERROR
            self._notify()
            return

        if sequence != self._sequence:
            logger.debug(f"Discarding stale lookup result for user {user_id}")
            return

        self._result = user
        self._phase = SearchPhase.FOUND
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("SearchController listener failed")
