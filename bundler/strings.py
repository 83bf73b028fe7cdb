from __future__ import annotations

import hashlib
import logging
import re
from typing import Dict, Iterator, List, Tuple

from tree_sitter import Node

from .model import ExtractedString
from .ts_parse import node_text, parse_tree


logger = logging.getLogger(__name__)

ID_HASH_LENGTH = 12

_TEMPLATE_ESCAPES: Dict[str, str] = {
	"`": "`",
	"\\": "\\",
	"n": "\n",
	"r": "\r",
	"t": "\t",
}

# Host message placeholders such as {playerName} or {weapon.name}.
_MESSAGE_PLACEHOLDER = re.compile(r"\{\s*[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*\s*\}")


def generate_string_id(value: str, prefix: str = "string_") -> str:
	digest = hashlib.md5(value.encode("utf-8")).hexdigest()
	return prefix + digest[:ID_HASH_LENGTH]


def unescape_template(raw: str) -> str:
	"""Decode the escapes of a template chunk in one left-to-right pass.

	Only backtick, backslash, \\n, \\r and \\t are decoded; any other escape is
	kept as written.
	"""
	out: List[str] = []
	i = 0
	while i < len(raw):
		ch = raw[i]
		if ch == "\\" and i + 1 < len(raw) and raw[i + 1] in _TEMPLATE_ESCAPES:
			out.append(_TEMPLATE_ESCAPES[raw[i + 1]])
			i += 2
			continue
		out.append(ch)
		i += 1
	return "".join(out)


def erase_placeholders(text: str) -> str:
	return _MESSAGE_PLACEHOLDER.sub("{}", text)


def template_value(source: bytes, template: Node) -> str:
	"""Normalized value of a template string node.

	Every ``${...}`` substitution becomes ``${}`` and the text around it is
	unescaped.
	"""
	parts: List[str] = []
	cursor = template.start_byte + 1
	for child in template.named_children:
		if child.type != "template_substitution":
			continue
		parts.append(unescape_template(source[cursor:child.start_byte].decode("utf-8")))
		parts.append("${}")
		cursor = child.end_byte
	parts.append(unescape_template(source[cursor:template.end_byte - 1].decode("utf-8")))
	return erase_placeholders("".join(parts))


class StringTable:
	"""Run-scoped id -> value table of extracted strings.

	Deduplicates on the normalized value: the content hash only mints an id
	for a value that has not been seen in this run.
	"""

	def __init__(self, prefix: str = "string_"):
		self.prefix = prefix
		self._by_value: Dict[str, str] = {}
		self._by_id: Dict[str, str] = {}

	def intern(self, value: str) -> str:
		existing = self._by_value.get(value)
		if existing is not None:
			return existing
		string_id = generate_string_id(value, self.prefix)
		if string_id in self._by_id:
			base = string_id
			n = 2
			while string_id in self._by_id:
				string_id = f"{base}_{n}"
				n += 1
			logger.warning("String id collision on %s, using %s", base, string_id)
		self._by_value[value] = string_id
		self._by_id[string_id] = value
		return string_id

	def __len__(self) -> int:
		return len(self._by_id)

	def __iter__(self) -> Iterator[ExtractedString]:
		for string_id, value in self._by_id.items():
			yield ExtractedString(id=string_id, value=value)

	def get(self, string_id: str) -> str:
		return self._by_id[string_id]

	def to_dict(self) -> Dict[str, str]:
		return dict(self._by_id)


class StringExtractor:
	"""Replaces tagged template literals with references into a StringTable."""

	def __init__(self, table: StringTable, tag: str = "s", accessor: str = "mod.stringkeys"):
		self.table = table
		self.tag = tag
		self.accessor = accessor
		self._probe = re.compile(r"(?<![\w$.])" + re.escape(tag) + r"\s*`")

	def _is_marked(self, source: bytes, node: Node) -> bool:
		if node.type != "call_expression":
			return False
		func = node.child_by_field_name("function")
		args = node.child_by_field_name("arguments")
		return (
			func is not None
			and args is not None
			and func.type == "identifier"
			and args.type == "template_string"
			and node_text(source, func) == self.tag
		)

	def find(self, source: bytes, root: Node) -> List[Tuple[Node, Node]]:
		"""Marked occurrences as (call, template) pairs in document order.

		Marked templates nested inside a marked template are not reported.
		"""
		found: List[Tuple[Node, Node]] = []
		stack = [root]
		while stack:
			node = stack.pop()
			if self._is_marked(source, node):
				found.append((node, node.child_by_field_name("arguments")))
				continue
			stack.extend(reversed(node.children))
		return found

	def extract(self, text: str, path: str = "") -> str:
		if not self._probe.search(text):
			return text
		source = text.encode("utf-8")
		tree = parse_tree(source, path)
		edits: List[Tuple[int, int, bytes]] = []
		for call, template in self.find(source, tree.root_node):
			string_id = self.table.intern(template_value(source, template))
			replacement = f"{self.accessor}.{string_id}".encode("utf-8")
			edits.append((call.start_byte, call.end_byte, replacement))
		for start, end, replacement in reversed(edits):
			source = source[:start] + replacement + source[end:]
		return source.decode("utf-8")
