"""
Popular listing state holder: items, loading flag and error for the popular screen.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger

from .catalog_client import CatalogClient
from .models import ItemRecord
from .observable import Observable


@dataclass(frozen=True)
class PopularState:
	items: Tuple[ItemRecord, ...] = ()
	page: int = 1
	loading: bool = False
	error: Optional[Exception] = None


class PopularFeed(Observable):
	"""
	Loads the popular listing on demand. Overlapping refreshes are resolved like searches:
	only the most recently started refresh may update the state.
	Failures are stored in the state, never raised.
	"""

	def __init__(self, client: CatalogClient):
		super().__init__()
		self._client = client  # anything with an async list_popular(page) also works
		self._state = PopularState()
		self._sequence = 0

	@property
	def state(self) -> PopularState:
		return self._state

	async def refresh(self, page: int = 1) -> PopularState:
		self._sequence += 1
		sequence = self._sequence
		# Previous items stay visible while reloading
		self._set_state(PopularState(items=self._state.items, page=page, loading=True))

		try:
			items = await self._client.list_popular(page)
		except Exception as e:
			if sequence == self._sequence:
				logger.warning(f"[Popular] Refresh of page {page} failed: {e}")
				self._set_state(PopularState(items=(), page=page, error=e))
			return self._state

		if sequence == self._sequence:
			logger.info(f"[Popular] Loaded {len(items)} items for page {page}")
			self._set_state(PopularState(items=tuple(items), page=page))
		else:
			logger.debug(f"[Popular] Discarding stale refresh #{sequence}")
		return self._state

	def _set_state(self, state: PopularState) -> None:
		self._state = state
		self._notify(state)
