"""
Shared fixtures for the catalog core tests.
"""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from cinecatalog.settings import CatalogSettings


@pytest.fixture
def settings() -> CatalogSettings:
	# _env_file=None keeps a developer's .env out of the tests
	return CatalogSettings(_env_file=None, TMDB_API_KEY='test-key', TMDB_BASE_URL='https://api.test/3')


@pytest.fixture
def make_payload():
	"""Factory for a complete remote item payload; keyword arguments override fields."""
	def _make(item_id: int = 1, **overrides):
		payload = {
			'id': item_id,
			'title': f"Movie {item_id}",
			'overview': f"Synopsis of movie {item_id}",
			'poster_path': f"/poster{item_id}.jpg",
			'backdrop_path': f"/backdrop{item_id}.jpg",
			'vote_average': 7.5,
			'release_date': '2010-07-16',
			'genre_ids': [28, 878],
		}
		payload.update(overrides)
		return payload
	return _make
