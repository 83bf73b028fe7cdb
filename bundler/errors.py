from __future__ import annotations

from typing import List


class BuildError(Exception):
	"""Base class for errors that abort a bundle build."""


class ConfigError(BuildError):
	pass


class EntryNotFoundError(BuildError):
	def __init__(self, entry: str):
		super().__init__(f"Entry not found: {entry}")
		self.entry = entry


class ImportCycleError(BuildError):
	"""Raised when a value import cycle is found and cycles are rejected."""

	def __init__(self, cycle: List[str]):
		super().__init__("Cyclic import detected: " + " -> ".join(cycle))
		self.cycle = cycle


class EmitError(BuildError):
	pass


class LoadError(BuildError):
	pass
