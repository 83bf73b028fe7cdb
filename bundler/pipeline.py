from __future__ import annotations

import logging
import os
from typing import List, Tuple

from .config import BuildConfig
from .depgraph import DependencyGraph, build_graph
from .emit import emit
from .flatten import ModuleFlattener
from .fs_scan import load_project, to_module_name
from .model import Bundle, BuildResult
from .strings import StringExtractor, StringTable
from .summarize import summarize_module


logger = logging.getLogger(__name__)


def entry_module(config: BuildConfig) -> str:
	return to_module_name(config.root, os.path.join(config.root, config.entry))


def load_graph(config: BuildConfig) -> Tuple[DependencyGraph, str]:
	logger.info("Loading project from entry %s", config.entry)
	modules = load_project(config.root, config.entry, config.externals)
	for module in modules.values():
		logger.debug("%s", summarize_module(module))
	return build_graph(modules), entry_module(config)


def transform(config: BuildConfig, graph: DependencyGraph, entry: str) -> Tuple[Bundle, StringTable, List[str], List[str]]:
	"""Flatten and extract every module in dependency order.

	Returns the bundle, the run's string table, the full module order and
	the excluded modules that were skipped.
	"""
	order = graph.topo_order(entry, config.cycles)
	logger.info("Bundling %d module(s)", len(order))

	table = StringTable(config.string_prefix)
	flattener = ModuleFlattener(entry, config.externals)
	extractor = StringExtractor(table, config.string_tag, config.string_accessor)
	bundle = Bundle()
	skipped: List[str] = []

	for name in order:
		if config.is_excluded(name):
			logger.debug("Skipping excluded module '%s'", name)
			skipped.append(name)
			continue
		module = graph.nodes[name]
		text = flattener.flatten(module)
		before = len(table)
		text = extractor.extract(text, module.path)
		logger.debug("Flattened '%s' (%d new string(s))", name, len(table) - before)
		bundle.append(name, text)

	return bundle, table, order, skipped


def build_bundle(config: BuildConfig) -> BuildResult:
	graph, entry = load_graph(config)
	bundle, table, order, skipped = transform(config, graph, entry)
	strings_file = emit(bundle, table, config.output_path, config.strings_path)
	return BuildResult(
		output=config.output_path,
		strings_file=strings_file,
		order=order,
		skipped=skipped,
		string_count=len(table),
	)
