"""
Unit tests for PopularFeed overlapping refreshes.
"""

import asyncio

import pytest

from cinecatalog.models import ItemRecord
from cinecatalog.popular_feed import PopularFeed


class GatedPopular:
	def __init__(self):
		self.gates = {}

	async def list_popular(self, page):
		gate = self.gates.get(page)
		if gate is not None:
			await gate.wait()
		return [ItemRecord(id=page * 100, score=6.0, title=f"page {page}")]


@pytest.mark.asyncio
async def test_older_refresh_cannot_overwrite_newer():
	client = GatedPopular()
	client.gates[1] = asyncio.Event()
	feed = PopularFeed(client)

	first = asyncio.create_task(feed.refresh(1))
	await asyncio.sleep(0)
	await feed.refresh(2)
	assert [i.title for i in feed.state.items] == ['page 2']

	client.gates[1].set()
	await first
	assert [i.title for i in feed.state.items] == ['page 2']
	assert feed.state.page == 2
	assert feed.state.loading is False


@pytest.mark.asyncio
async def test_items_stay_visible_while_reloading():
	client = GatedPopular()
	feed = PopularFeed(client)
	await feed.refresh(1)

	client.gates[1] = asyncio.Event()
	reload = asyncio.create_task(feed.refresh(1))
	await asyncio.sleep(0)
	assert feed.state.loading is True
	assert [i.id for i in feed.state.items] == [100]

	client.gates[1].set()
	await reload
	assert feed.state.loading is False
