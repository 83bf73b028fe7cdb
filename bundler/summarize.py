from __future__ import annotations

from typing import List

from .model import BuildResult, SourceModule


def summarize_module(m: SourceModule) -> str:
	parts: List[str] = []
	parts.append(f"Module {m.module} at {m.path}")
	local = [i.specifier for i in m.imports if i.target]
	external = [i.specifier for i in m.imports if not i.target]
	exported = [n for e in m.exports for n in e.names]
	if local:
		parts.append(f"  Local imports: {', '.join(local)}")
	if external:
		parts.append(f"  External imports: {', '.join(external)}")
	if exported:
		parts.append(f"  Exports: {', '.join(exported[:10])}")
	return "\n".join(parts)


def summarize_build(result: BuildResult) -> str:
	lines: List[str] = []
	if result.string_count and result.strings_file:
		lines.append(f"✓ Extracted {result.string_count} strings to {result.strings_file}")
	lines.append(f"Wrote {result.output}")
	return "\n".join(lines)
