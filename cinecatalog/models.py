"""
Data models for the catalog core.
Defines the immutable ItemRecord used by the client, the favorites store and the search controller.
"""

# Import dataclass to define a simple "record-like" class without boilerplate
from dataclasses import dataclass, field  # frozen value type
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, Mapping, Optional, Tuple  # payloads and optional values

from .errors import SchemaError  # raised on invalid payloads

# Defaults applied when the remote payload omits a textual field
DEFAULT_TITLE = 'Untitled'
DEFAULT_OVERVIEW = 'No synopsis'
DEFAULT_RELEASE_DATE = 'Unknown'

# Image CDN and placeholder images used when a path is absent
IMAGE_BASE_URL = 'https://image.tmdb.org/t/p/w500'
POSTER_PLACEHOLDER_URL = 'https://placehold.co/500x750/333/FFF?text=No+Image'
BACKDROP_PLACEHOLDER_URL = 'https://placehold.co/780x439/333/FFF?text=No+Image'


@dataclass(frozen=True, eq=False)
class ItemRecord:
	"""
	Represents a single catalog entry (a movie) as returned by the remote service.
	Two records are the same item when their ids match, whatever the other fields say,
	because different endpoints return slightly different shapes for one movie.
	"""
	id: int  # primary identity
	score: float  # vote average on a 0-10 scale, never defaulted
	title: str = DEFAULT_TITLE  # display title
	overview: str = DEFAULT_OVERVIEW  # synopsis
	release_date: str = DEFAULT_RELEASE_DATE  # free-form date string
	poster_path: Optional[str] = None  # relative image path, may be absent
	backdrop_path: Optional[str] = None  # relative image path, may be absent
	genre_ids: Tuple[int, ...] = field(default_factory=tuple)  # ordered genre ids

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, ItemRecord):
			return NotImplemented
		return self.id == other.id

	def __hash__(self) -> int:
		return hash(self.id)

	@classmethod
	def from_payload(cls, payload: Mapping[str, Any]) -> 'ItemRecord':
		"""
		Build a record from an untyped JSON object.
		Textual fields and genre ids fall back to defaults; id and vote_average are required.
		"""
		if not isinstance(payload, Mapping):
			raise SchemaError('<payload>', f"Expected a JSON object, got {type(payload).__name__}")

		item_id = payload.get('id')
		if not _is_int(item_id):
			raise SchemaError('id')

		# Required: a missing rating is a schema violation, never 0
		score = payload.get('vote_average')
		if not _is_number(score):
			raise SchemaError('vote_average')

		genre_ids = payload.get('genre_ids')
		if genre_ids is None:
			genre_ids = []
		if not isinstance(genre_ids, (list, tuple)) or not all(_is_int(g) for g in genre_ids):
			raise SchemaError('genre_ids')

		return cls(
			id=item_id,
			title=_optional_text(payload, 'title', DEFAULT_TITLE),
			overview=_optional_text(payload, 'overview', DEFAULT_OVERVIEW),
			score=float(score),
			release_date=_optional_text(payload, 'release_date', DEFAULT_RELEASE_DATE),
			poster_path=_optional_path(payload, 'poster_path'),
			backdrop_path=_optional_path(payload, 'backdrop_path'),
			genre_ids=tuple(genre_ids),
		)

	def to_payload(self) -> Dict[str, Any]:
		"""Inverse of from_payload, using the remote service's key names."""
		return {
			'id': self.id,
			'title': self.title,
			'overview': self.overview,
			'poster_path': self.poster_path,
			'backdrop_path': self.backdrop_path,
			'vote_average': self.score,
			'release_date': self.release_date,
			'genre_ids': list(self.genre_ids),
		}

	def poster_url(self, base_url: str = IMAGE_BASE_URL) -> str:
		"""Absolute poster URL, or the poster placeholder."""
		if self.poster_path:
			return f"{base_url}{self.poster_path}"
		return POSTER_PLACEHOLDER_URL

	def backdrop_url(self, base_url: str = IMAGE_BASE_URL) -> str:
		"""Absolute backdrop URL; falls back to the poster, then to the backdrop placeholder."""
		if self.backdrop_path:
			return f"{base_url}{self.backdrop_path}"
		if self.poster_path:
			return f"{base_url}{self.poster_path}"
		return BACKDROP_PLACEHOLDER_URL


def _is_int(value: Any) -> bool:
	# bool is an int subclass but never a valid id
	return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_text(payload: Mapping[str, Any], key: str, default: str) -> str:
	value = payload.get(key)
	if value is None:
		return default
	if not isinstance(value, str):
		raise SchemaError(key)
	return value


def _optional_path(payload: Mapping[str, Any], key: str) -> Optional[str]:
	value = payload.get(key)
	if value is not None and not isinstance(value, str):
		raise SchemaError(key)
	return value
