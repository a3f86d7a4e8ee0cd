"""
Favorites store module.
Holds the persisted, observable, id-unique list of bookmarked items.

Lifecycle: UNINITIALIZED -> LOADING -> READY. The persisted list is read once, in the
background, as soon as the store is constructed; until READY the store reports no
favorites and refuses mutations.

Ordering: toggle() changes memory and notifies subscribers before it returns, then
writes the whole list in the background. Writes are serialized in toggle order. A crash
between the notification and the end of the write loses that one change but never
corrupts the stored list, because every write replaces the list as a whole.
"""

import asyncio  # background load and serialized writes
import json  # one JSON document per stored entry
from enum import Enum
from typing import List, Optional, Set, Tuple

from loguru import logger  # console logger

from .errors import PersistenceError, SchemaError, StoreNotReadyError
from .models import ItemRecord
from .observable import Observable
from .storage import PreferenceStorage

DEFAULT_FAVORITES_KEY = 'favorites'


class StoreState(str, Enum):
	UNINITIALIZED = 'uninitialized'
	LOADING = 'loading'
	READY = 'ready'


class FavoritesStore(Observable):
	"""
	Observable favorites list backed by a PreferenceStorage key.
	Subscribers receive a tuple snapshot of the favorites after every change,
	including the transition to READY.
	Must be constructed while an event loop is running.
	"""

	def __init__(self, storage: PreferenceStorage, key: str = DEFAULT_FAVORITES_KEY):
		super().__init__()
		self._storage = storage  # durable backend
		self._key = key  # storage key holding the whole list
		self._favorites: List[ItemRecord] = []  # insertion-ordered, unique by id
		self._state = StoreState.UNINITIALIZED
		self._ready = asyncio.Event()  # set exactly once
		self._write_lock = asyncio.Lock()  # FIFO: writes land in toggle order
		self._pending_writes: Set[asyncio.Task] = set()
		self.last_error: Optional[PersistenceError] = None  # most recent read/write failure
		self._load_task = asyncio.get_running_loop().create_task(self._load())

	@property
	def state(self) -> StoreState:
		return self._state

	def is_initialized(self) -> bool:
		return self._state is StoreState.READY

	async def wait_until_ready(self) -> None:
		await self._ready.wait()

	def favorites(self) -> Tuple[ItemRecord, ...]:
		"""Snapshot of the favorites; empty until the store is READY."""
		if not self.is_initialized():
			return ()
		return tuple(self._favorites)

	def is_favorite(self, item_id: int) -> bool:
		return self._index_of(item_id) is not None

	def toggle(self, item: ItemRecord) -> 'asyncio.Task[None]':
		"""
		Remove the item if its id is already a favorite, otherwise append it.
		Memory and subscribers are updated before returning; the returned task
		completes when the write reaches storage and raises PersistenceError if it failed.
		"""
		if not self.is_initialized():
			raise StoreNotReadyError("Favorites are still loading; wait_until_ready() first")

		index = self._index_of(item.id)
		if index is None:
			self._favorites.append(item)
			logger.debug(f"[Favorites] Added {item.id} ({item.title})")
		else:
			del self._favorites[index]
			logger.debug(f"[Favorites] Removed {item.id} ({item.title})")

		# Serialize now so the write carries exactly this state, whatever happens later
		snapshot = [json.dumps(f.to_payload(), ensure_ascii=False) for f in self._favorites]
		self._notify(self.favorites())

		task = asyncio.get_running_loop().create_task(self._persist(snapshot))
		self._pending_writes.add(task)
		task.add_done_callback(self._on_write_done)
		return task

	async def flush(self) -> None:
		"""Wait for every pending write. Re-raises the last write failure, if any."""
		failure: Optional[BaseException] = None
		while self._pending_writes:
			results = await asyncio.gather(*list(self._pending_writes), return_exceptions=True)
			for result in results:
				if isinstance(result, Exception):
					failure = result
		if failure is not None:
			raise failure

	async def aclose(self) -> None:
		"""Finish loading and flush pending writes. Subscribers are dropped."""
		await self._load_task
		try:
			await self.flush()
		finally:
			self._clear_subscriptions()

	def _index_of(self, item_id: int) -> Optional[int]:
		for i, favorite in enumerate(self._favorites):
			if favorite.id == item_id:
				return i
		return None

	async def _load(self) -> None:
		self._state = StoreState.LOADING
		logger.info(f"[Favorites] Loading favorites from storage key '{self._key}'")

		loaded: List[ItemRecord] = []
		try:
			try:
				entries = await self._storage.get_string_list(self._key)
			except Exception as e:
				# The store still becomes usable, starting from an empty list
				self.last_error = e if isinstance(e, PersistenceError) else PersistenceError(str(e))
				logger.error(f"[Favorites] Could not read stored favorites: {e}")
				entries = None

			seen: Set[int] = set()
			for position, raw in enumerate(entries or []):
				try:
					record = ItemRecord.from_payload(json.loads(raw))
				except (ValueError, TypeError, SchemaError) as e:
					logger.warning(f"[Favorites] Skipping corrupt entry at position {position}: {e}")
					continue
				if record.id in seen:
					logger.warning(f"[Favorites] Skipping duplicate id {record.id} at position {position}")
					continue
				seen.add(record.id)
				loaded.append(record)
		finally:
			self._favorites = loaded
			self._state = StoreState.READY
			self._ready.set()
		logger.info(f"[Favorites] Ready with {len(loaded)} favorites")
		self._notify(self.favorites())

	async def _persist(self, snapshot: List[str]) -> None:
		async with self._write_lock:
			await self._storage.set_string_list(self._key, snapshot)

	def _on_write_done(self, task: 'asyncio.Task[None]') -> None:
		self._pending_writes.discard(task)
		if task.cancelled():
			return
		error = task.exception()  # also marks the exception as retrieved
		if error is None:
			return
		if isinstance(error, PersistenceError):
			self.last_error = error
		logger.error(f"[Favorites] Could not save favorites: {error}")
