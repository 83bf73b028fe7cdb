"""Bundler package that flattens a TypeScript project into one host script.

Modules:
- fs_scan.py: Module resolution and project loading.
- ts_parse.py: tree-sitter parsing of import and export edges.
- depgraph.py: Dependency graph and topological ordering.
- flatten.py: Rewriting modules into one shared top-level scope.
- strings.py: Extraction of tagged string literals into a string table.
- emit.py: Writing the bundle and the string table.
- model.py: Data structures for modules, edges and build results.
"""

__all__ = [
	"config",
	"depgraph",
	"emit",
	"errors",
	"flatten",
	"fs_scan",
	"log",
	"model",
	"pipeline",
	"strings",
	"summarize",
	"ts_parse",
]
