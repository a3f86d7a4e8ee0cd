"""
Runtime configuration, read from the environment (or a local .env file).
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Value shipped in sample configs; treated the same as a missing key
PLACEHOLDER_API_KEY = 'YOUR_API_KEY_HERE'


class CatalogSettings(BaseSettings):
	model_config = SettingsConfigDict(env_file='.env', extra='ignore')

	TMDB_API_KEY: str = ''
	TMDB_BASE_URL: str = 'https://api.themoviedb.org/3'
	TMDB_LANGUAGE: str = 'es-ES'
	TMDB_IMAGE_BASE_URL: str = 'https://image.tmdb.org/t/p/w500'

	# None leaves timeouts to the transport's owner
	REQUEST_TIMEOUT_S: Optional[float] = None

	SEARCH_DEBOUNCE_MS: int = 500

	FAVORITES_PATH: str = 'data/favorites.json'
	FAVORITES_KEY: str = 'favorites'

	@property
	def has_api_key(self) -> bool:
		key = self.TMDB_API_KEY.strip()
		return bool(key) and key != PLACEHOLDER_API_KEY


@lru_cache(maxsize=1)
def get_settings() -> CatalogSettings:
	return CatalogSettings()
