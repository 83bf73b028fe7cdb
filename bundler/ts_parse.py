from __future__ import annotations

import os
from functools import lru_cache
from typing import Callable, List, Optional, Tuple

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_parser

from .model import ExportEdge, ImportEdge, SourceModule


Resolver = Callable[[str], Optional[str]]

DECLARATION_TYPES = {
	"function_declaration",
	"generator_function_declaration",
	"class_declaration",
	"abstract_class_declaration",
	"lexical_declaration",
	"variable_declaration",
	"interface_declaration",
	"type_alias_declaration",
	"enum_declaration",
	"ambient_declaration",
	"internal_module",
	"module",
}

FUNCTION_TYPES = {"function_declaration", "generator_function_declaration"}


@lru_cache(maxsize=None)
def _parser_for(language: str) -> Parser:
	return get_parser(language)


def language_for(path: str) -> str:
	return "tsx" if path.endswith((".tsx", ".jsx")) else "typescript"


def parse_tree(source: bytes, path: str = "") -> Tree:
	return _parser_for(language_for(path)).parse(source)


def node_text(source: bytes, node: Node) -> str:
	return source[node.start_byte:node.end_byte].decode("utf-8")


def has_token(node: Node, token: str) -> bool:
	return any(not c.is_named and c.type == token for c in node.children)


def string_value(source: bytes, node: Node) -> str:
	# Module specifiers never carry escapes worth decoding.
	return node_text(source, node)[1:-1]


def _import_source(node: Node) -> Optional[Node]:
	src = node.child_by_field_name("source")
	if src is not None:
		return src
	for child in node.named_children:
		if child.type == "import_require_clause":
			return child.child_by_field_name("source")
	return None


def _import_names(source: bytes, node: Node) -> Tuple[List[str], bool]:
	"""Return (bound local names, every binding is type-only)."""
	names: List[str] = []
	all_types = True
	clause = next((c for c in node.named_children if c.type == "import_clause"), None)
	if clause is None:
		return names, False
	for child in clause.named_children:
		if child.type == "identifier":
			names.append(node_text(source, child))
			all_types = False
		elif child.type == "namespace_import":
			ident = next((c for c in child.named_children if c.type == "identifier"), None)
			if ident is not None:
				names.append(node_text(source, ident))
			all_types = False
		elif child.type == "named_imports":
			for spec in child.named_children:
				if spec.type != "import_specifier":
					continue
				bound = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
				if bound is not None:
					names.append(node_text(source, bound))
				if not has_token(spec, "type"):
					all_types = False
	return names, all_types and bool(names)


def is_declaration(decl: Node) -> bool:
	if decl.type == "expression_statement":
		return any(c.type in ("internal_module", "module") for c in decl.named_children)
	return decl.type in DECLARATION_TYPES


def declared_names(source: bytes, decl: Node) -> List[str]:
	if decl.type in ("lexical_declaration", "variable_declaration"):
		names = []
		for child in decl.named_children:
			if child.type == "variable_declarator":
				name = child.child_by_field_name("name")
				if name is not None:
					names.append(node_text(source, name))
		return names
	if decl.type == "expression_statement":
		inner = next((c for c in decl.named_children if c.type in ("internal_module", "module")), None)
		return declared_names(source, inner) if inner is not None else []
	if decl.type == "ambient_declaration":
		inner = next((c for c in decl.named_children if c.type in DECLARATION_TYPES), None)
		return declared_names(source, inner) if inner is not None else []
	name = decl.child_by_field_name("name")
	return [node_text(source, name)] if name is not None else []


def export_clause_names(source: bytes, node: Node) -> List[str]:
	names: List[str] = []
	clause = next((c for c in node.named_children if c.type == "export_clause"), None)
	if clause is None:
		return names
	for spec in clause.named_children:
		if spec.type == "export_specifier":
			name = spec.child_by_field_name("name")
			if name is not None:
				names.append(node_text(source, name))
	return names


def parse_ts_module(module_name: str, path: str, text: str, resolve: Resolver) -> SourceModule:
	"""Parse a module and record its import and export edges.

	``resolve`` maps a module specifier to a project module identity, or
	``None`` for specifiers supplied by the host.
	"""
	source = text.encode("utf-8")
	tree = parse_tree(source, path)
	imports: List[ImportEdge] = []
	exports: List[ExportEdge] = []

	for node in tree.root_node.named_children:
		if node.type == "import_statement":
			src = _import_source(node)
			if src is None:
				continue
			specifier = string_value(source, src)
			names, all_types = _import_names(source, node)
			imports.append(
				ImportEdge(
					specifier=specifier,
					target=resolve(specifier),
					names=names,
					type_only=has_token(node, "type") or all_types,
					start=node.start_byte,
					end=node.end_byte,
				)
			)
		elif node.type == "export_statement":
			src = node.child_by_field_name("source")
			decl = node.child_by_field_name("declaration")
			if src is not None:
				specifier = string_value(source, src)
				exports.append(
					ExportEdge(
						names=export_clause_names(source, node),
						specifier=specifier,
						target=resolve(specifier),
						star=has_token(node, "*"),
						type_only=has_token(node, "type"),
						start=node.start_byte,
						end=node.end_byte,
					)
				)
			elif decl is not None:
				exports.append(
					ExportEdge(names=declared_names(source, decl), start=node.start_byte, end=node.end_byte)
				)
			elif has_token(node, "default"):
				exports.append(ExportEdge(names=["default"], start=node.start_byte, end=node.end_byte))
			else:
				exports.append(
					ExportEdge(
						names=export_clause_names(source, node),
						start=node.start_byte,
						end=node.end_byte,
					)
				)

	return SourceModule(
		module=module_name,
		path=os.path.abspath(path) if path else path,
		text=text,
		imports=imports,
		exports=exports,
	)
