from __future__ import annotations

import json
import os
from typing import Any, Dict, Literal, Mapping, Optional, Set

from pydantic import BaseModel, ValidationError

from .errors import ConfigError


DEFAULT_CONFIG_FILE = "bundle.config.json"


class BuildConfig(BaseModel):
	project_root: str = "."
	entry: str = "src/main.ts"
	output: str = "dist/Script.ts"
	strings_file: str = "Strings.json"
	# Specifiers the host provides; their import statements are kept.
	externals: Set[str] = set()
	exclude: Set[str] = {"lib/string-macro.ts"}
	string_tag: str = "s"
	string_prefix: str = "string_"
	string_accessor: str = "mod.stringkeys"
	cycles: Literal["warn", "error"] = "warn"

	@property
	def root(self) -> str:
		return os.path.abspath(self.project_root)

	@property
	def output_path(self) -> str:
		return os.path.join(self.root, self.output)

	@property
	def strings_path(self) -> str:
		return os.path.join(os.path.dirname(self.output_path), self.strings_file)

	def is_excluded(self, module: str) -> bool:
		return module.replace("\\", "/") in self.exclude

	@classmethod
	def from_mapping(cls, data: Mapping[str, Any]) -> "BuildConfig":
		try:
			return cls.model_validate(dict(data))
		except ValidationError as e:
			raise ConfigError(f"Invalid build configuration: {e}") from e

	@classmethod
	def from_file(cls, path: str) -> "BuildConfig":
		try:
			with open(path, "r", encoding="utf-8") as fh:
				data = json.load(fh)
		except (OSError, json.JSONDecodeError) as e:
			raise ConfigError(f"Cannot read config file {path}: {e}") from e
		if not isinstance(data, dict):
			raise ConfigError(f"Config file {path} must contain a JSON object")
		# Relative project roots are relative to the config file.
		root = data.get("project_root", ".")
		data["project_root"] = os.path.join(os.path.dirname(os.path.abspath(path)), root)
		return cls.from_mapping(data)


def load_config(
	config_path: Optional[str] = None,
	project_root: Optional[str] = None,
	overrides: Optional[Dict[str, Any]] = None,
) -> BuildConfig:
	"""Build the effective configuration.

	An explicit config file wins; otherwise ``bundle.config.json`` in the
	project root is used when present. Non-empty overrides are applied last.
	"""
	if config_path is None:
		candidate = os.path.join(project_root or ".", DEFAULT_CONFIG_FILE)
		if os.path.isfile(candidate):
			config_path = candidate

	if config_path is not None:
		config = BuildConfig.from_file(config_path)
	else:
		config = BuildConfig()

	updates: Dict[str, Any] = {}
	if project_root is not None:
		updates["project_root"] = project_root
	for key, value in (overrides or {}).items():
		if value is None:
			continue
		if key in ("externals", "exclude"):
			if not value:
				continue
			value = set(getattr(config, key)) | set(value)
		updates[key] = value
	if not updates:
		return config
	return BuildConfig.from_mapping({**config.model_dump(), **updates})
