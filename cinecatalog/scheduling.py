"""
Cancellable delayed actions on the running event loop (used for search debounce).
"""

import asyncio
from typing import Callable

from loguru import logger


class PendingDispatch:
	"""
	Runs `action` once after `delay` seconds unless cancelled first.
	Cancelling only affects the waiting period: once the action has started it runs to completion.
	"""

	def __init__(self, delay: float, action: Callable[[], None]):
		self.delay = delay
		self._action = action
		self._fired = False
		self._task = asyncio.get_running_loop().create_task(self._run())

	async def _run(self) -> None:
		await asyncio.sleep(self.delay)
		self._fired = True
		self._action()

	@property
	def fired(self) -> bool:
		return self._fired

	@property
	def pending(self) -> bool:
		return not self._task.done()

	def cancel(self) -> bool:
		"""Cancel if still waiting. Returns True when the action will not run."""
		if self._fired or self._task.done():
			return False
		logger.trace(f"[Scheduler] Cancelled dispatch scheduled in {self.delay:.3f}s")
		return self._task.cancel()

	async def wait(self) -> None:
		"""Wait until the action ran or the dispatch was cancelled."""
		try:
			await self._task
		except asyncio.CancelledError:
			if not self._task.cancelled():
				raise  # the waiter itself was cancelled
