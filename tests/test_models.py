"""
Unit tests for ItemRecord: payload parsing, defaults, schema violations and image URLs.
"""

import pytest

from cinecatalog.errors import SchemaError
from cinecatalog.models import (
	BACKDROP_PLACEHOLDER_URL,
	DEFAULT_OVERVIEW,
	DEFAULT_RELEASE_DATE,
	DEFAULT_TITLE,
	IMAGE_BASE_URL,
	POSTER_PLACEHOLDER_URL,
	ItemRecord,
)


def test_from_payload_reads_every_field(make_payload):
	item = ItemRecord.from_payload(make_payload(27205, title='Inception', vote_average=8))

	assert item.id == 27205
	assert item.title == 'Inception'
	assert item.overview == 'Synopsis of movie 27205'
	assert item.poster_path == '/poster27205.jpg'
	assert item.backdrop_path == '/backdrop27205.jpg'
	assert item.score == 8.0 and isinstance(item.score, float)
	assert item.release_date == '2010-07-16'
	assert item.genre_ids == (28, 878)


def test_missing_optional_fields_use_defaults():
	item = ItemRecord.from_payload({'id': 3, 'vote_average': 6.1})

	assert item.title == DEFAULT_TITLE
	assert item.overview == DEFAULT_OVERVIEW
	assert item.release_date == DEFAULT_RELEASE_DATE
	assert item.poster_path is None
	assert item.backdrop_path is None
	assert item.genre_ids == ()


def test_null_optional_fields_use_defaults():
	item = ItemRecord.from_payload({
		'id': 3, 'vote_average': 6.1, 'title': None, 'overview': None,
		'release_date': None, 'genre_ids': None, 'poster_path': None,
	})
	assert item.title == DEFAULT_TITLE
	assert item.overview == DEFAULT_OVERVIEW
	assert item.genre_ids == ()


def test_missing_score_is_a_schema_error(make_payload):
	payload = make_payload()
	del payload['vote_average']

	with pytest.raises(SchemaError) as excinfo:
		ItemRecord.from_payload(payload)
	assert excinfo.value.field == 'vote_average'


@pytest.mark.parametrize('bad_score', ['7.5', None, True, [7]])
def test_non_numeric_score_is_a_schema_error(make_payload, bad_score):
	with pytest.raises(SchemaError) as excinfo:
		ItemRecord.from_payload(make_payload(vote_average=bad_score))
	assert excinfo.value.field == 'vote_average'


def test_non_integer_genre_ids_are_a_schema_error(make_payload):
	with pytest.raises(SchemaError) as excinfo:
		ItemRecord.from_payload(make_payload(genre_ids=[28, '878']))
	assert excinfo.value.field == 'genre_ids'


def test_missing_or_invalid_id_is_a_schema_error(make_payload):
	payload = make_payload()
	del payload['id']
	with pytest.raises(SchemaError):
		ItemRecord.from_payload(payload)
	with pytest.raises(SchemaError):
		ItemRecord.from_payload(make_payload(item_id='12'))


def test_non_object_payload_is_a_schema_error():
	with pytest.raises(SchemaError):
		ItemRecord.from_payload(['not', 'an', 'object'])


def test_payload_round_trip(make_payload):
	payload = make_payload(42, poster_path=None, backdrop_path=None, genre_ids=[])
	assert ItemRecord.from_payload(payload).to_payload() == payload

	# defaults are substituted once, then survive further round trips unchanged
	sparse = ItemRecord.from_payload({'id': 9, 'vote_average': 5})
	again = ItemRecord.from_payload(sparse.to_payload())
	assert again.to_payload() == sparse.to_payload()


def test_equality_is_by_id_only():
	a = ItemRecord(id=1, score=7.0, title='Popular shape')
	b = ItemRecord(id=1, score=7.1, title='Search shape', genre_ids=(18,))
	c = ItemRecord(id=2, score=7.0, title='Popular shape')

	assert a == b
	assert a != c
	assert len({a, b, c}) == 2


def test_poster_url():
	assert ItemRecord(id=1, score=1.0, poster_path='/p.jpg').poster_url() == f"{IMAGE_BASE_URL}/p.jpg"
	assert ItemRecord(id=1, score=1.0).poster_url() == POSTER_PLACEHOLDER_URL
	assert ItemRecord(id=1, score=1.0, poster_path='/p.jpg').poster_url('https://cdn/x') == 'https://cdn/x/p.jpg'


def test_backdrop_url_falls_back_to_poster_then_placeholder():
	with_backdrop = ItemRecord(id=1, score=1.0, poster_path='/p.jpg', backdrop_path='/b.jpg')
	poster_only = ItemRecord(id=1, score=1.0, poster_path='/p.jpg')
	neither = ItemRecord(id=1, score=1.0)

	assert with_backdrop.backdrop_url() == f"{IMAGE_BASE_URL}/b.jpg"
	assert poster_only.backdrop_url() == f"{IMAGE_BASE_URL}/p.jpg"
	assert neither.backdrop_url() == BACKDROP_PLACEHOLDER_URL
