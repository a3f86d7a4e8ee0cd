"""
Browse the catalog from the command line.

This script:
1) Loads the popular listing
2) Optionally runs a debounced search for --query
3) Optionally toggles a favorite by id (from the listing or the search results)
4) Prints the persisted favorites

Usage:
    python -m scripts.browse --query "inception" --toggle 27205

Requires TMDB_API_KEY in the environment or in a .env file.
"""

import argparse  # command-line flags
import asyncio  # event loop
import sys

from loguru import logger  # console logging

from cinecatalog.catalog_client import CatalogClient  # remote catalog
from cinecatalog.errors import CatalogError
from cinecatalog.favorites_store import FavoritesStore  # persisted favorites
from cinecatalog.popular_feed import PopularFeed
from cinecatalog.search_controller import SearchController, SearchPhase
from cinecatalog.settings import get_settings
from cinecatalog.storage import JsonFileStorage


def parse_args(argv=None) -> argparse.Namespace:
	parser = argparse.ArgumentParser(description="Browse, search and bookmark movies.")
	parser.add_argument('--page', type=int, default=1, help="popular listing page")
	parser.add_argument('--query', default='', help="title to search for")
	parser.add_argument('--toggle', type=int, default=None, help="id of an item to add/remove from favorites")
	return parser.parse_args(argv)


def print_items(header: str, items, client: CatalogClient) -> None:
	print(f"\n{header}")
	for i, item in enumerate(items, 1):
		print(f"  {i:>2}. [{item.id}] {item.title} ({item.release_date}) - {item.score:.1f}")
		print(f"      {client.poster_url(item)}")
	if not items:
		print("  (none)")


async def run(args: argparse.Namespace) -> int:
	settings = get_settings()
	client = CatalogClient(settings)
	store = FavoritesStore(JsonFileStorage(settings.FAVORITES_PATH), key=settings.FAVORITES_KEY)

	try:
		# 1) Popular listing
		logger.info("[1/4] Loading popular listing...")
		feed = PopularFeed(client)
		popular = await feed.refresh(args.page)
		if popular.error is not None:
			logger.error(f"Popular listing failed: {popular.error}")
			return 1
		print_items(f"Popular (page {popular.page})", popular.items, client)
		candidates = list(popular.items)

		# 2) Search
		if args.query:
			logger.info(f"[2/4] Searching for {args.query!r}...")
			controller = SearchController(client, quiet_period=settings.SEARCH_DEBOUNCE_MS / 1000)
			controller.on_query_changed(args.query)
			await controller.wait_idle()
			state = controller.state
			controller.dispose()
			if state.phase is SearchPhase.FAILED:
				logger.error(f"Search failed: {state.error_message}")
				return 1
			print_items(f"Results for {args.query!r}", state.results, client)
			candidates.extend(state.results)

		# 3) Toggle
		await store.wait_until_ready()
		if args.toggle is not None:
			logger.info(f"[3/4] Toggling favorite {args.toggle}...")
			match = next((c for c in candidates if c.id == args.toggle), None)
			if match is None:
				match = next((f for f in store.favorites() if f.id == args.toggle), None)
			if match is None:
				logger.error(f"Item {args.toggle} is neither listed nor a favorite")
				return 1
			await store.toggle(match)

		# 4) Favorites
		logger.info("[4/4] Favorites")
		print_items("Favorites", store.favorites(), client)
		return 0
	except CatalogError as e:
		logger.error(f"{type(e).__name__}: {e}")
		return 1
	finally:
		await store.aclose()
		await client.aclose()


def main(argv=None) -> int:
	return asyncio.run(run(parse_args(argv)))


if __name__ == '__main__':
	sys.exit(main())
