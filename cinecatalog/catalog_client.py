"""
Catalog client module.
Fetches popular and search listings from the remote movie catalog and validates them into ItemRecords.
"""

from typing import Any, Dict, List, Optional  # type hints

import httpx  # async HTTP transport
from loguru import logger  # console logger
from pydantic import BaseModel, ValidationError  # response envelope validation

from .errors import ConfigError, HttpStatusError, NetworkError, SchemaError
from .models import ItemRecord
from .settings import CatalogSettings, get_settings


class ListingEnvelope(BaseModel):
	"""Shape shared by /movie/popular and /search/movie responses."""
	results: List[Dict[str, Any]]  # raw item payloads, validated one by one afterwards
	page: Optional[int] = None
	total_pages: Optional[int] = None
	total_results: Optional[int] = None


class CatalogClient:
	"""
	Stateless access to the remote catalog.
	Every call checks the credential first and never retries; errors are always raised
	to the caller as one of the CatalogError subclasses.
	"""

	def __init__(
		self,
		settings: Optional[CatalogSettings] = None,  # defaults to environment settings
		http_client: Optional[httpx.AsyncClient] = None,  # injected transport (tests, shared pools)
	):
		self.settings = settings or get_settings()
		self._client = http_client
		self._owns_client = http_client is None  # only close what we created

	async def list_popular(self, page: int = 1) -> List[ItemRecord]:
		"""Return the popular listing in the order the service sent it."""
		self._check_page(page)
		self._require_api_key()
		return await self._fetch_listing('/movie/popular', {'page': page})

	async def search(self, query: str, page: int = 1) -> List[ItemRecord]:
		"""
		Search by title. Blank queries return an empty list without touching the network;
		any other query is sent exactly as typed.
		"""
		if not query or not query.strip():
			return []
		self._check_page(page)
		self._require_api_key()
		return await self._fetch_listing('/search/movie', {'query': query, 'page': page})

	def poster_url(self, item: ItemRecord) -> str:
		return item.poster_url(self.settings.TMDB_IMAGE_BASE_URL)

	def backdrop_url(self, item: ItemRecord) -> str:
		return item.backdrop_url(self.settings.TMDB_IMAGE_BASE_URL)

	async def aclose(self) -> None:
		"""Close the HTTP client if this instance created it."""
		if self._client is not None and self._owns_client:
			await self._client.aclose()
			self._client = None

	def _require_api_key(self) -> None:
		if not self.settings.has_api_key:
			raise ConfigError("TMDB_API_KEY is not configured; set it in the environment or .env file")

	@staticmethod
	def _check_page(page: int) -> None:
		if page < 1:
			raise ValueError(f"page must be >= 1, got {page}")

	def _get_client(self) -> httpx.AsyncClient:
		if self._client is None:
			self._client = httpx.AsyncClient(
				base_url=self.settings.TMDB_BASE_URL,
				timeout=self.settings.REQUEST_TIMEOUT_S,
			)
		return self._client

	async def _fetch_listing(self, path: str, params: Dict[str, Any]) -> List[ItemRecord]:
		client = self._get_client()
		query = {
			'api_key': self.settings.TMDB_API_KEY,
			'language': self.settings.TMDB_LANGUAGE,
			**params,
		}
		logger.debug(f"[Catalog] GET {path} | page={params.get('page')} query={params.get('query')!r}")

		try:
			response = await client.get(path, params=query)
		except httpx.TransportError as e:
			# DNS, connect, read/write timeouts, resets, protocol errors
			raise NetworkError(f"Request to {path} failed: {e}") from e

		if not response.is_success:
			logger.debug(f"[Catalog] {path} answered {response.status_code} {response.reason_phrase}")
			raise HttpStatusError(response.status_code, response.reason_phrase)

		try:
			body = response.json()
		except ValueError as e:
			raise SchemaError('results', f"Response from {path} is not valid JSON") from e

		try:
			envelope = ListingEnvelope.model_validate(body)
		except ValidationError as e:
			raise SchemaError('results', f"Unexpected response envelope from {path}: {e.error_count()} error(s)") from e

		items = [ItemRecord.from_payload(entry) for entry in envelope.results]  # keep remote order
		logger.debug(f"[Catalog] {path} returned {len(items)} items")
		return items
