from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Set, Tuple

from .errors import ImportCycleError
from .model import DependencyEdge, GraphReport, SourceModule


logger = logging.getLogger(__name__)


class DependencyGraph:
    """Local-import graph of a project, importer -> dependency."""
    def __init__(self):
        self.nodes: Dict[str, SourceModule] = {}
        self.edges: List[DependencyEdge] = []
        self.external: Dict[str, List[str]] = {}  # pass-through specifiers per module
        self._deps: Dict[str, List[str]] = {}
        self._type_only: Dict[Tuple[str, str], bool] = {}

    def add_node(self, module: SourceModule):
        """Add a module to the graph."""
        self.nodes[module.module] = module
        self._deps.setdefault(module.module, [])

    def add_edge(self, importer: str, dependency: str, type_only: bool = False):
        """Add an edge from importer to dependency.

        A pair seen as both a type-only and a value import is a value edge.
        """
        if importer not in self.nodes or dependency not in self.nodes:
            return
        key = (importer, dependency)
        if key in self._type_only:
            if self._type_only[key] and not type_only:
                self._type_only[key] = False
                for i, edge in enumerate(self.edges):
                    if edge.from_module == importer and edge.to_module == dependency:
                        self.edges[i] = DependencyEdge(from_module=importer, to_module=dependency)
            return
        self._type_only[key] = type_only
        self._deps[importer].append(dependency)
        self.edges.append(DependencyEdge(from_module=importer, to_module=dependency, type_only=type_only))

    def dependencies_of(self, module: str) -> List[Tuple[str, bool]]:
        """Dependencies in source order, value imports before type-only ones."""
        deps = [(d, self._type_only[(module, d)]) for d in self._deps.get(module, [])]
        return [d for d in deps if not d[1]] + [d for d in deps if d[1]]

    def topo_order(self, root: str, cycles: str = "warn") -> List[str]:
        """Order modules reachable from root so dependencies come first.

        Depth-first post-order; the first visit of a module fixes its place.
        A value import back to a module still being visited is a cycle: with
        ``cycles="error"`` it raises ImportCycleError, otherwise it is logged
        and skipped. Type-only back edges are skipped silently.
        """
        if root not in self.nodes:
            return []

        seen: Set[str] = set()
        stack: List[str] = []
        ordered: List[str] = []

        def visit(name: str) -> None:
            seen.add(name)
            stack.append(name)
            for dep, type_only in self.dependencies_of(name):
                if dep in stack:
                    if type_only:
                        continue
                    cycle = stack[stack.index(dep):] + [dep]
                    if cycles == "error":
                        raise ImportCycleError(cycle)
                    logger.warning("Cyclic import, ordering may be incomplete: %s", " -> ".join(cycle))
                    continue
                if dep not in seen:
                    visit(dep)
            stack.pop()
            ordered.append(name)

        visit(root)
        return ordered

    def report(self, root: str, cycles: str = "warn") -> GraphReport:
        return GraphReport(
            root=root,
            order=self.topo_order(root, cycles),
            external={k: v for k, v in self.external.items() if v},
            dependencies=list(self.edges),
        )


def build_graph(modules: Mapping[str, SourceModule]) -> DependencyGraph:
    """Build the dependency graph for a set of loaded modules."""
    graph = DependencyGraph()
    for module in modules.values():
        graph.add_node(module)

    for module in modules.values():
        externals: List[str] = []
        for imp in module.imports:
            if imp.target is not None:
                graph.add_edge(module.module, imp.target, imp.type_only)
            elif imp.specifier not in externals:
                externals.append(imp.specifier)
        for exp in module.exports:
            if exp.target is not None:
                graph.add_edge(module.module, exp.target, exp.type_only)
        graph.external[module.module] = externals

    return graph
