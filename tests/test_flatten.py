from textwrap import dedent

import pytest

from bundler.flatten import (
	ModuleFlattener,
	infer_default_name,
	is_barrel,
	strip_relative_imports,
)
from bundler.ts_parse import parse_ts_module


def load(name, code, resolved=None):
	return parse_ts_module(name, name, dedent(code), (resolved or {}).get)


def test_local_import_removed():
	m = load("src/main.ts", 'import { a } from "./a";\nconst x = a;\n', {"./a": "src/a.ts"})
	assert ModuleFlattener("src/other.ts").flatten(m) == "const x = a;\n"


def test_external_imports_preserved():
	code = """\
		import { PlayerState } from "./player";
		import type { Widget } from "./widget";
		import * as lib from "host-lib";
		import { helper } from "shared";
		const x = lib.go(PlayerState, helper);
		"""
	resolved = {"./player": "src/player.ts", "./widget": "src/widget.ts", "shared": "src/shared.ts"}
	m = load("src/main.ts", code, resolved)
	out = ModuleFlattener("src/main.ts", externals={"shared"}).flatten(m)
	assert out == (
		'import * as lib from "host-lib";\n'
		'import { helper } from "shared";\n'
		"const x = lib.go(PlayerState, helper);\n"
	)


def test_unresolved_relative_import_removed_by_cleanup():
	m = load("src/main.ts", 'import { ParseUI } from "../../lib/ui";\nParseUI();\n')
	assert m.imports[0].target is None
	assert ModuleFlattener("src/main.ts").flatten(m) == "ParseUI();\n"


DECLARATIONS = """\
	export function f() {}
	export function* gen() {}
	export class C {}
	export abstract class A {}
	export const k = 1;
	export let n = 2;
	export interface I {}
	export type T = number;
	export enum E { X }
	"""


def test_export_markers_stripped_outside_entry():
	m = load("src/player.ts", DECLARATIONS)
	out = ModuleFlattener("src/main.ts").flatten(m)
	assert out == dedent(DECLARATIONS).replace("export ", "")


def test_entry_keeps_export_on_functions_only():
	m = load("src/main.ts", DECLARATIONS)
	out = ModuleFlattener("src/main.ts").flatten(m)
	assert out == dedent(
		"""\
		export function f() {}
		export function* gen() {}
		class C {}
		abstract class A {}
		const k = 1;
		let n = 2;
		interface I {}
		type T = number;
		enum E { X }
		"""
	)


def test_local_export_list_kept():
	m = load("src/a.ts", "const a = 1;\nexport { a };\n")
	assert ModuleFlattener("src/main.ts").flatten(m) == "const a = 1;\nexport { a };\n"


def test_default_export_expression_becomes_named_const():
	m = load("src/weapon-catalog.view.ts", "export default { close: 1 };\n")
	out = ModuleFlattener("src/main.ts").flatten(m)
	assert out == "const weaponCatalogViewDefault = { close: 1 };\n"


def test_default_export_in_barrel_uses_generic_name():
	m = load("src/systems/ui/index.ts", "export default 5;\n")
	assert ModuleFlattener("src/main.ts").flatten(m) == "const defaultExport = 5;\n"


def test_default_name_collision_gets_suffix():
	flattener = ModuleFlattener("src/main.ts")
	first = flattener.flatten(load("src/a/index.ts", "export default 1;\n"))
	second = flattener.flatten(load("src/b/index.ts", "export default 2;\n"))
	assert first == "const defaultExport = 1;\n"
	assert second == "const defaultExport2 = 2;\n"


def test_named_default_declaration_keeps_its_name():
	code = "export default function setup() {}\n"
	assert ModuleFlattener("src/main.ts").flatten(load("src/a.ts", code)) == "function setup() {}\n"
	assert ModuleFlattener("src/main.ts").flatten(load("src/main.ts", code)) == "export function setup() {}\n"


def test_local_reexports_become_local_export_lists():
	code = """\
		export { PlayerState, helper as h } from "./player";
		export * from "./other";
		export { Local } from "host";
		"""
	resolved = {"./player": "src/player.ts", "./other": "src/other.ts"}
	m = load("src/systems/index.ts", code, resolved)
	out = ModuleFlattener("src/main.ts").flatten(m)
	assert out == (
		"// Re-export from src/player.ts\n"
		"export { PlayerState, helper };\n"
		'export { Local } from "host";\n'
	)


def test_reexported_default_uses_target_binding():
	flattener = ModuleFlattener("src/main.ts")
	flattener.flatten(load("src/view.ts", "export default { close: 1 };\n"))
	flattener.flatten(load("src/setup.ts", "export default function setup() {}\n"))
	code = """\
		export { default as View, Panel } from "./view";
		export { default } from "./setup";
		export { default as Theme } from "./theme";
		"""
	resolved = {"./view": "src/view.ts", "./setup": "src/setup.ts", "./theme": "src/theme.ts"}
	out = flattener.flatten(load("src/index.ts", code, resolved))
	assert out == (
		"// Re-export from src/view.ts\n"
		"export { viewDefault, Panel };\n"
		"// Re-export from src/setup.ts\n"
		"export { setup };\n"
		"// Re-export from src/theme.ts\n"
		"export { themeDefault };\n"
	)


def test_namespace_export_marker_stripped():
	code = "export namespace NS {\n\texport const a = 1;\n}\n"
	expected = "namespace NS {\n\texport const a = 1;\n}\n"
	assert ModuleFlattener("src/main.ts").flatten(load("src/ns.ts", code)) == expected
	assert ModuleFlattener("src/main.ts").flatten(load("src/main.ts", code)) == expected


def test_strip_relative_imports_handles_multiline_and_side_effects():
	text = dedent(
		"""\
		import {
		  a,
		  b,
		} from "./ab";
		import "../side";
		import type { T } from '../types';
		import { keep } from "host";
		const x = 1;
		"""
	)
	assert strip_relative_imports(text) == 'import { keep } from "host";\nconst x = 1;\n'


def test_strip_relative_imports_is_idempotent():
	text = 'import { a } from "./a";\nimport lib from "lib";\nconst y = "import x from \'./x\'";\n'
	once = strip_relative_imports(text)
	assert strip_relative_imports(once) == once
	clean = 'import lib from "lib";\nconst z = 2;\n'
	assert strip_relative_imports(clean) == clean


@pytest.mark.parametrize(
	"module, barrel, expected",
	[
		("src/player.ts", False, "playerDefault"),
		("src/player-state.ts", False, "playerStateDefault"),
		("src/weapon-catalog.view.ts", False, "weaponCatalogViewDefault"),
		("src/Theme.tsx", False, "ThemeDefault"),
		("src/3d-model.ts", False, "_3dModelDefault"),
		("src/systems/ui/index.ts", True, "defaultExport"),
	],
)
def test_infer_default_name(module, barrel, expected):
	assert infer_default_name(module, barrel) == expected


def test_is_barrel():
	assert is_barrel("src/systems/ui/index.ts")
	assert not is_barrel("src/systems/ui/view.ts")
