from textwrap import dedent

from bundler.ts_parse import parse_ts_module


def test_parse_import_and_export_edges(tmp_path):
	code = dedent(
		"""
		import { a, type B } from "./a";
		import type { C } from "./c";
		import { type D } from "./d";
		import { E as F } from "host-lib";
		import "./side";
		export { x } from "./x";
		export * from "./star";
		export function f() {}
		export const g = 1, h = 2;
		export default 42;
		"""
	)
	resolved = {
		"./a": "a.ts",
		"./c": "c.ts",
		"./d": "d.ts",
		"./side": "side.ts",
		"./x": "x.ts",
		"./star": "star.ts",
	}
	p = tmp_path / "m.ts"
	p.write_text(code)
	facts = parse_ts_module("m.ts", str(p), p.read_text(), resolved.get)

	assert facts.module == "m.ts"
	assert [i.specifier for i in facts.imports] == ["./a", "./c", "./d", "host-lib", "./side"]
	assert facts.imports[0].names == ["a", "B"]
	assert facts.imports[0].target == "a.ts"
	assert not facts.imports[0].type_only
	assert facts.imports[1].type_only
	assert facts.imports[2].type_only
	assert facts.imports[3].target is None
	assert facts.imports[3].names == ["F"]
	assert facts.imports[4].names == []

	assert facts.exports[0].names == ["x"]
	assert facts.exports[0].target == "x.ts"
	assert facts.exports[1].star
	assert facts.exports[2].names == ["f"]
	assert facts.exports[3].names == ["g", "h"]
	assert facts.exports[4].names == ["default"]


def test_edge_spans_cover_statement():
	code = 'const a = 1;\nimport { b } from "./b";\n'
	facts = parse_ts_module("m.ts", "m.ts", code, lambda spec: "b.ts")
	edge = facts.imports[0]
	assert code.encode()[edge.start:edge.end].decode() == 'import { b } from "./b";'
