from __future__ import annotations

import logging
import posixpath
import re
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node

from .model import ExportEdge, ImportEdge, SourceModule
from .ts_parse import FUNCTION_TYPES, export_clause_names, is_declaration, node_text, parse_tree


logger = logging.getLogger(__name__)

Edit = Tuple[int, int, bytes]

BARREL_BASENAME = "index"
BARREL_DEFAULT_NAME = "defaultExport"

_RELATIVE_IMPORT = re.compile(
	r"""^[ \t]*import\s+(?:[^;'"`]*?\bfrom\s*)?(['"])\.\.?/[^'"\n]*\1[ \t]*;?[ \t]*(?:\r?\n)?""",
	re.MULTILINE,
)


def strip_relative_imports(text: str) -> str:
	"""Remove import statements whose specifier is a relative path.

	Runs after the structural rewrite; on already clean text it is a no-op.
	"""
	return _RELATIVE_IMPORT.sub("", text)


def module_base_name(module: str) -> str:
	base = posixpath.basename(module)
	for suffix in (".d.ts", ".tsx", ".ts", ".jsx", ".js"):
		if base.endswith(suffix):
			return base[: -len(suffix)]
	return base


def is_barrel(module: str) -> bool:
	return module_base_name(module) == BARREL_BASENAME


def infer_default_name(module: str, barrel: bool) -> str:
	"""Binding name for a module's ``export default`` expression.

	Barrel modules get a generic name; any other module gets its base name as
	a camelCase identifier with a ``Default`` suffix.
	"""
	if barrel:
		return BARREL_DEFAULT_NAME
	words = [w for w in re.split(r"[^A-Za-z0-9_$]+", module_base_name(module)) if w]
	if not words:
		return BARREL_DEFAULT_NAME
	name = words[0] + "".join(w[:1].upper() + w[1:] for w in words[1:])
	if name[0].isdigit():
		name = "_" + name
	return name + "Default"


class DefaultNameRegistry:
	"""Hands out default-export binding names, unique within one bundle.

	The first module to claim a name keeps it; later claimants get a numeric
	suffix starting at 2.
	"""

	def __init__(self):
		self.claimed: Dict[str, str] = {}
		self.by_module: Dict[str, str] = {}

	def claim(self, name: str, module: str) -> str:
		unique = name
		n = 2
		while unique in self.claimed:
			unique = f"{name}{n}"
			n += 1
		if unique != name:
			logger.warning(
				"Default export name '%s' of %s already used by %s, binding as '%s'",
				name,
				module,
				self.claimed[name],
				unique,
			)
		self.claimed[unique] = module
		self.by_module[module] = unique
		return unique

	def binding_for(self, module: str) -> str:
		"""Name bound to a module's default export, claimed or inferred."""
		if module in self.by_module:
			return self.by_module[module]
		return infer_default_name(module, is_barrel(module))


def _consume_line_end(source: bytes, end: int) -> int:
	while end < len(source) and source[end:end + 1] in (b" ", b"\t"):
		end += 1
	if source[end:end + 2] == b"\r\n":
		return end + 2
	if source[end:end + 1] == b"\n":
		return end + 1
	return end


def _token(node: Node, token: str) -> Optional[Node]:
	return next((c for c in node.children if not c.is_named and c.type == token), None)


def apply_edits(source: bytes, edits: Iterable[Edit]) -> bytes:
	for start, end, replacement in sorted(edits, key=lambda e: e[0], reverse=True):
		source = source[:start] + replacement + source[end:]
	return source


class ModuleFlattener:
	"""Rewrites modules so they can share one top-level scope.

	Local imports disappear, local re-exports become plain ``export { ... }``
	lists, export markers are dropped from declarations (the entry module
	keeps them on functions) and default exports become named constants.
	"""

	def __init__(self, entry: str, externals: Iterable[str] = ()):
		self.entry = entry
		self.externals: Set[str] = set(externals)
		self.default_names = DefaultNameRegistry()

	def is_local(self, edge: ImportEdge | ExportEdge) -> bool:
		return edge.target is not None and edge.specifier not in self.externals

	def flatten(self, module: SourceModule) -> str:
		source = module.text.encode("utf-8")
		tree = parse_tree(source, module.path)
		imports = {e.start: e for e in module.imports}
		exports = {e.start: e for e in module.exports}
		is_entry = module.module == self.entry

		edits: List[Edit] = []
		for node in tree.root_node.named_children:
			if node.type == "import_statement":
				edge = imports.get(node.start_byte)
				if edge is not None and self.is_local(edge):
					edits.append((node.start_byte, _consume_line_end(source, node.end_byte), b""))
			elif node.type == "export_statement":
				edit = self._rewrite_export(module, source, node, exports.get(node.start_byte), is_entry)
				if edit is not None:
					edits.append(edit)

		text = apply_edits(source, edits).decode("utf-8")
		return strip_relative_imports(text)

	def _rewrite_export(
		self,
		module: SourceModule,
		source: bytes,
		node: Node,
		edge: Optional[ExportEdge],
		is_entry: bool,
	) -> Optional[Edit]:
		if node.child_by_field_name("source") is not None:
			if edge is None or not self.is_local(edge):
				return None
			names = [
				self.default_names.binding_for(edge.target) if n == "default" else n
				for n in export_clause_names(source, node)
			]
			if not names:
				return (node.start_byte, _consume_line_end(source, node.end_byte), b"")
			keyword = "export type" if edge.type_only else "export"
			text = f"// Re-export from {edge.target}\n{keyword} {{ {', '.join(names)} }};"
			return (node.start_byte, node.end_byte, text.encode("utf-8"))

		decl = node.child_by_field_name("declaration")
		if decl is not None:
			if not is_declaration(decl):
				return None
			export_token = _token(node, "export")
			default_token = _token(node, "default")
			if default_token is not None:
				decl_name = decl.child_by_field_name("name")
				if decl_name is not None:
					self.default_names.by_module[module.module] = node_text(source, decl_name)
			if is_entry and decl.type in FUNCTION_TYPES:
				if default_token is None:
					return None
				return (default_token.start_byte, decl.start_byte, b"")
			start = export_token.start_byte if export_token is not None else node.start_byte
			return (start, decl.start_byte, b"")

		value = node.child_by_field_name("value")
		if value is not None and _token(node, "default") is not None:
			inferred = infer_default_name(module.module, is_barrel(module.module))
			name = self.default_names.claim(inferred, module.module)
			text = f"const {name} = {node_text(source, value)};"
			return (node.start_byte, node.end_byte, text.encode("utf-8"))

		return None
