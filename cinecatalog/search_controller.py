"""
Search controller module.
Turns a stream of keystrokes into debounced catalog searches and exposes the result as observable state.
"""

import asyncio  # in-flight searches run as tasks
from dataclasses import dataclass, replace  # immutable state snapshots
from enum import Enum
from typing import Optional, Set, Tuple

from loguru import logger  # console logger

from .catalog_client import CatalogClient
from .models import ItemRecord
from .observable import Observable
from .scheduling import PendingDispatch

DEFAULT_QUIET_PERIOD_S = 0.5  # quiet time after the last keystroke before searching


class SearchPhase(str, Enum):
	IDLE = 'idle'
	DEBOUNCING = 'debouncing'
	FETCHING = 'fetching'
	SUCCESS = 'success'
	FAILED = 'failed'


@dataclass(frozen=True)
class SearchState:
	"""Snapshot delivered to subscribers after every change."""
	query: str = ''  # latest text typed by the user
	results: Tuple[ItemRecord, ...] = ()  # results currently displayed
	results_query: str = ''  # the query that produced `results`
	loading: bool = False
	error: Optional[Exception] = None
	phase: SearchPhase = SearchPhase.IDLE

	@property
	def error_message(self) -> str:
		return str(self.error) if self.error is not None else ''


class SearchController(Observable):
	"""
	Debounces query input and drives CatalogClient.search.

	Each dispatched search gets a sequence number. A response (or error) is applied only
	if its number is still the latest one; anything older is discarded, so a slow response
	to an old query can never replace the results of a newer one. Clearing the query and
	disposing the controller also move the sequence forward.

	`client` is anything with an async `search(query)` method (normally a CatalogClient).
	Must be constructed while an event loop is running.
	"""

	def __init__(self, client: CatalogClient, quiet_period: float = DEFAULT_QUIET_PERIOD_S):
		super().__init__()
		self._client = client  # catalog access
		self.quiet_period = quiet_period  # seconds
		self._state = SearchState()
		self._sequence = 0  # last issued token
		self._applied_sequence = 0  # token of the results currently shown
		self._pending: Optional[PendingDispatch] = None  # at most one scheduled dispatch
		self._in_flight: Set[asyncio.Task] = set()
		self._disposed = False

	@property
	def state(self) -> SearchState:
		return self._state

	@property
	def disposed(self) -> bool:
		return self._disposed

	@property
	def applied_sequence(self) -> int:
		return self._applied_sequence

	def on_query_changed(self, text: str) -> None:
		"""Record the new text and (re)start the quiet period; blank text clears immediately."""
		if self._disposed:
			logger.warning("[Search] Query change ignored: controller disposed")
			return

		self._cancel_pending()

		if not text.strip():
			self._sequence += 1  # anything still in flight is now stale
			self._set_state(SearchState(query=text))
			return

		self._set_state(replace(self._state, query=text, phase=SearchPhase.DEBOUNCING))
		self._pending = PendingDispatch(self.quiet_period, lambda: self._dispatch(text))

	def retry(self) -> None:
		"""Search the current query again right away, skipping the quiet period."""
		if self._disposed or not self._state.query.strip():
			return
		self._cancel_pending()
		self._dispatch(self._state.query)

	def dispose(self) -> None:
		"""Cancel the pending dispatch and ignore every response still in flight."""
		if self._disposed:
			return
		self._cancel_pending()
		self._disposed = True
		self._sequence += 1
		self._clear_subscriptions()
		logger.debug(f"[Search] Disposed with {len(self._in_flight)} request(s) still in flight")

	async def aclose(self) -> None:
		"""Dispose and wait for in-flight requests to settle."""
		self.dispose()
		await self.wait_idle()

	async def wait_idle(self) -> None:
		"""Wait until no dispatch is scheduled and no search is in flight."""
		while True:
			if self._pending is not None and self._pending.pending:
				await self._pending.wait()
				continue
			tasks = [t for t in self._in_flight if not t.done()]
			if not tasks:
				return
			await asyncio.gather(*tasks, return_exceptions=True)

	def _cancel_pending(self) -> None:
		if self._pending is not None:
			self._pending.cancel()
			self._pending = None

	def _dispatch(self, text: str) -> None:
		if self._disposed:  # timer fired after teardown
			return
		self._pending = None
		self._sequence += 1
		sequence = self._sequence
		logger.debug(f"[Search] Dispatch #{sequence} for {text!r}")
		self._set_state(replace(self._state, loading=True, error=None, phase=SearchPhase.FETCHING))

		task = asyncio.get_running_loop().create_task(self._run_search(sequence, text))
		self._in_flight.add(task)
		task.add_done_callback(self._in_flight.discard)

	async def _run_search(self, sequence: int, text: str) -> None:
		try:
			results = await self._client.search(text)
		except Exception as e:
			if not self._is_current(sequence):
				logger.debug(f"[Search] Discarding stale error from #{sequence}: {e}")
				return
			logger.warning(f"[Search] Search #{sequence} for {text!r} failed: {e}")
			self._set_state(replace(
				self._state,
				results=(),
				results_query=text,
				loading=False,
				error=e,
				phase=self._settled_phase(SearchPhase.FAILED),
			))
			return

		if not self._is_current(sequence):
			logger.debug(f"[Search] Discarding stale results from #{sequence} (latest is #{self._sequence})")
			return

		self._applied_sequence = sequence
		logger.debug(f"[Search] Applying #{sequence}: {len(results)} results for {text!r}")
		self._set_state(replace(
			self._state,
			results=tuple(results),
			results_query=text,
			loading=False,
			error=None,
			phase=self._settled_phase(SearchPhase.SUCCESS),
		))

	def _settled_phase(self, outcome: SearchPhase) -> SearchPhase:
		# A newer keystroke may already be waiting out its quiet period
		return SearchPhase.DEBOUNCING if self._pending is not None else outcome

	def _is_current(self, sequence: int) -> bool:
		return not self._disposed and sequence == self._sequence

	def _set_state(self, state: SearchState) -> None:
		self._state = state
		self._notify(state)
