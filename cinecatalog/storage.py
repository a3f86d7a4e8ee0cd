"""
Key/value preference storage.
Each key holds an ordered list of strings and is always read and written as a whole.
"""

import asyncio  # run blocking file I/O off the event loop
import json  # on-disk format
import os  # atomic replace
import tempfile  # sibling temp file for atomic writes
from pathlib import Path  # filesystem-safe paths
from typing import Dict, List, Optional, Sequence

from loguru import logger  # console logger

from .errors import PersistenceError


class PreferenceStorage:
	"""
	Interface shared by the storage backends.
	get_string_list returns None when the key has never been written.
	"""

	async def get_string_list(self, key: str) -> Optional[List[str]]:
		raise NotImplementedError

	async def set_string_list(self, key: str, values: Sequence[str]) -> None:
		raise NotImplementedError


class MemoryStorage(PreferenceStorage):
	"""Process-local backend; nothing survives a restart."""

	def __init__(self, initial: Optional[Dict[str, List[str]]] = None):
		self._data: Dict[str, List[str]] = {k: list(v) for k, v in (initial or {}).items()}

	async def get_string_list(self, key: str) -> Optional[List[str]]:
		values = self._data.get(key)
		return list(values) if values is not None else None

	async def set_string_list(self, key: str, values: Sequence[str]) -> None:
		self._data[key] = list(values)


class JsonFileStorage(PreferenceStorage):
	"""
	Stores every key in one JSON object on disk.
	Writes go to a temporary file in the same directory which then replaces the
	original, so a crash mid-write leaves the previous contents intact.
	"""

	def __init__(self, path):
		self.path = Path(path)  # normalize path
		self._lock = asyncio.Lock()  # one read-modify-write at a time

	async def get_string_list(self, key: str) -> Optional[List[str]]:
		data = await asyncio.to_thread(self._read_all)
		values = data.get(key)
		if values is None:
			return None
		if not isinstance(values, list):
			raise PersistenceError(f"Key '{key}' in {self.path} does not hold a list")
		return values

	async def set_string_list(self, key: str, values: Sequence[str]) -> None:
		async with self._lock:
			await asyncio.to_thread(self._write_key, key, list(values))
		logger.debug(f"[Storage] Wrote {len(values)} entries under '{key}' to {self.path}")

	def _read_all(self) -> dict:
		if not self.path.exists():  # first run
			return {}
		try:
			with open(self.path, 'r', encoding='utf-8') as f:
				data = json.load(f)
		except (OSError, ValueError) as e:  # ValueError covers bad JSON and bad UTF-8
			raise PersistenceError(f"Cannot read {self.path}: {e}") from e
		if not isinstance(data, dict):
			raise PersistenceError(f"{self.path} does not contain a JSON object")
		return data

	def _write_key(self, key: str, values: List[str]) -> None:
		try:
			data = self._read_all()  # keep the other keys
		except PersistenceError as e:
			# The key is rewritten whole, so an unreadable file is replaced rather than kept
			logger.warning(f"[Storage] Replacing unreadable {self.path}: {e}")
			data = {}
		data[key] = values
		try:
			self.path.parent.mkdir(parents=True, exist_ok=True)
			fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix='.tmp')
			try:
				with os.fdopen(fd, 'w', encoding='utf-8') as f:
					json.dump(data, f, ensure_ascii=False, indent=2)
				os.replace(tmp_name, self.path)
			except BaseException:
				Path(tmp_name).unlink(missing_ok=True)
				raise
		except OSError as e:
			raise PersistenceError(f"Cannot write {self.path}: {e}") from e
