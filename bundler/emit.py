from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import List, Optional, Tuple

from .errors import EmitError
from .model import Bundle
from .strings import StringTable


logger = logging.getLogger(__name__)


def serialize_strings(table: StringTable) -> str:
	return json.dumps(table.to_dict(), indent=2, ensure_ascii=False)


def _stage(path: str, suffix: str) -> Tuple[int, str]:
	directory = os.path.dirname(path) or "."
	return tempfile.mkstemp(dir=directory, prefix="." + os.path.basename(path), suffix=suffix)


def _discard(paths: List[str]) -> None:
	for path in paths:
		if os.path.exists(path):
			os.remove(path)


def _write_all(files: List[Tuple[str, str]]) -> None:
	"""Write every file or none of them.

	Contents go to temporary files beside their targets first. Existing
	targets are moved aside before the new files are moved into place and are
	restored if any move fails.
	"""
	for path, _ in files:
		if os.path.isdir(path):
			raise EmitError(f"Cannot write {path}: is a directory")

	staged: List[Tuple[str, str]] = []
	backups: List[Tuple[str, str]] = []
	placed: List[str] = []
	reserved: List[str] = []
	try:
		for path, content in files:
			os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
			fd, tmp = _stage(path, ".tmp")
			staged.append((tmp, path))
			with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
				fh.write(content)
		for tmp, path in staged:
			if os.path.exists(path):
				fd, backup = _stage(path, ".bak")
				os.close(fd)
				reserved.append(backup)
				os.replace(path, backup)
				backups.append((backup, path))
			os.replace(tmp, path)
			placed.append(path)
	except OSError as e:
		_discard(placed)
		for backup, path in backups:
			os.replace(backup, path)
		_discard([tmp for tmp, _ in staged])
		_discard(reserved)
		raise EmitError(f"Cannot write {e.filename or 'output'}: {e.strerror or e}") from e
	_discard(reserved)


def emit(bundle: Bundle, table: StringTable, output_path: str, strings_path: str) -> Optional[str]:
	"""Write the bundle and, when strings were extracted, the string table.

	Returns the string table path, or None when no table was written.
	"""
	files = [(output_path, bundle.render())]
	if len(table):
		files.append((strings_path, serialize_strings(table)))
	_write_all(files)
	logger.debug("Wrote %d file(s)", len(files))
	return strings_path if len(table) else None
