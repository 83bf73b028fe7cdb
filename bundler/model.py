from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ImportEdge(BaseModel):
	model_config = ConfigDict(frozen=True)

	specifier: str
	target: Optional[str] = None
	names: List[str] = []
	type_only: bool = False
	start: int
	end: int


class ExportEdge(BaseModel):
	model_config = ConfigDict(frozen=True)

	names: List[str] = []
	specifier: Optional[str] = None
	target: Optional[str] = None
	star: bool = False
	type_only: bool = False
	start: int
	end: int


class SourceModule(BaseModel):
	model_config = ConfigDict(frozen=True)

	module: str
	path: str
	text: str
	imports: List[ImportEdge] = []
	exports: List[ExportEdge] = []



class ExtractedString(BaseModel):
	model_config = ConfigDict(frozen=True)

	id: str
	value: str


class BundlePiece(BaseModel):
	module: str
	text: str


class Bundle(BaseModel):
	pieces: List[BundlePiece] = []

	def append(self, module: str, text: str) -> None:
		self.pieces.append(BundlePiece(module=module, text=text))

	def render(self, header: str = "") -> str:
		return header + "\n".join(
			f"\n// ===== File: {p.module} =====\n{p.text}" for p in self.pieces
		)


class DependencyEdge(BaseModel):
	from_module: str
	to_module: str
	type_only: bool = False


class GraphReport(BaseModel):
	root: str
	order: List[str]
	external: Dict[str, List[str]]
	dependencies: List[DependencyEdge]


class BuildResult(BaseModel):
	output: str
	strings_file: Optional[str] = None
	order: List[str]
	skipped: List[str] = []
	string_count: int = 0
