from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, List, Optional

from .errors import EntryNotFoundError, LoadError
from .model import SourceModule
from .ts_parse import parse_ts_module


logger = logging.getLogger(__name__)

# Tried in order after the specifier itself.
MODULE_SUFFIXES: List[str] = [".ts", ".tsx", ".d.ts"]
INDEX_FILES: List[str] = ["index.ts", "index.tsx"]


def to_module_name(root: str, file_path: str) -> str:
	rel_path = os.path.relpath(os.path.abspath(file_path), root)
	return rel_path.replace(os.sep, "/")


def is_relative(specifier: str) -> bool:
	return specifier in (".", "..") or specifier.startswith(("./", "../"))


def _existing_file(path: str) -> Optional[str]:
	if os.path.isfile(path):
		return os.path.abspath(path)
	return None


def resolve_specifier(importer_path: str, specifier: str) -> Optional[str]:
	"""Resolve a relative specifier against the importing file.

	Returns the absolute path of the first matching file or ``None``.
	"""
	if not is_relative(specifier):
		return None
	base = os.path.normpath(os.path.join(os.path.dirname(importer_path), specifier))
	candidates = [base] + [base + suffix for suffix in MODULE_SUFFIXES]
	candidates += [os.path.join(base, name) for name in INDEX_FILES]
	for candidate in candidates:
		found = _existing_file(candidate)
		if found is not None:
			return found
	return None


def read_module(root: str, path: str, externals: Iterable[str] = ()) -> SourceModule:
	externals = set(externals)
	with open(path, "r", encoding="utf-8") as fh:
		text = fh.read()

	def resolve(specifier: str) -> Optional[str]:
		if specifier in externals:
			return None
		found = resolve_specifier(path, specifier)
		if found is None:
			if is_relative(specifier):
				logger.debug("Unresolved local import '%s' in %s", specifier, to_module_name(root, path))
			return None
		return to_module_name(root, found)

	return parse_ts_module(to_module_name(root, path), path, text, resolve)


def load_project(root: str, entry: str, externals: Iterable[str] = ()) -> Dict[str, SourceModule]:
	"""Load the entry module and every local module reachable from it.

	Both imports and ``export ... from`` re-exports are followed. The result
	maps module identity to module, entry first.
	"""
	root = os.path.abspath(root)
	entry_path = os.path.join(root, entry)
	if not os.path.isfile(entry_path):
		raise EntryNotFoundError(entry)

	externals = set(externals)
	modules: Dict[str, SourceModule] = {}
	pending = [entry_path]
	while pending:
		path = pending.pop()
		name = to_module_name(root, path)
		if name in modules:
			continue
		logger.debug("Loading module '%s'", name)
		try:
			module = read_module(root, path, externals)
		except (OSError, UnicodeDecodeError) as e:
			raise LoadError(f"Cannot read module {name}: {e}") from e
		modules[name] = module
		targets = [e.target for e in module.imports] + [e.target for e in module.exports]
		for target in reversed(targets):
			if target is not None and target not in modules:
				pending.append(os.path.join(root, target))
	logger.info("Loaded %d module(s) from %s", len(modules), root)
	return modules
