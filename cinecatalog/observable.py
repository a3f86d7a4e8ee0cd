"""
Minimal publish/subscribe support for state holders.
Subscribers receive a snapshot of the new state and keep a handle they release to stop listening.
"""

from typing import Any, Callable, List

from loguru import logger


class Subscription:
	"""Handle returned by Observable.subscribe. Also usable as a context manager."""

	def __init__(self, owner: 'Observable', callback: Callable[[Any], None]):
		self._owner = owner
		self.callback = callback

	@property
	def active(self) -> bool:
		return self in self._owner._subscriptions

	def release(self) -> None:
		"""Stop receiving notifications. Releasing twice is harmless."""
		self._owner._unsubscribe(self)

	def __enter__(self) -> 'Subscription':
		return self

	def __exit__(self, *exc) -> None:
		self.release()


class Observable:
	"""Owns the subscriber list; subclasses call _notify after each state change."""

	def __init__(self):
		self._subscriptions: List[Subscription] = []

	def subscribe(self, callback: Callable[[Any], None]) -> Subscription:
		subscription = Subscription(self, callback)
		self._subscriptions.append(subscription)
		return subscription

	def subscriber_count(self) -> int:
		return len(self._subscriptions)

	def _unsubscribe(self, subscription: Subscription) -> None:
		if subscription in self._subscriptions:
			self._subscriptions.remove(subscription)

	def _clear_subscriptions(self) -> None:
		self._subscriptions.clear()

	def _notify(self, snapshot: Any) -> None:
		# Iterate a copy: callbacks may release their own subscription
		for subscription in list(self._subscriptions):
			try:
				subscription.callback(snapshot)
			except Exception:
				logger.exception(f"[{type(self).__name__}] Subscriber {subscription.callback!r} raised")
