"""Dependency graph and upgrade conflict detection.

Edges point from a package to the packages it depends on. They come from
each record's ``dependencies`` list, which the resolution phase fills in
from the index metadata of the latest release.

Conflict detection is deliberately coarse: any pending upgrade of a
dependency is reported as a potential risk for its dependents, even when
the dependent's requirement would still be satisfied.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

import networkx as nx

from pyelevate.models.conflict import Conflict
from pyelevate.models.package import PackageRecord
from pyelevate.utils.logger import get_logger
from pyelevate.utils.version_utils import is_newer

logger = get_logger("dependency_graph")


class DependencyGraph:
    """Directed graph of package names.

    Example::

        >>> graph = DependencyGraph()
        >>> graph.add_dependency("flask", "jinja2")
        >>> graph.get_dependents("jinja2")
        ['flask']
    """

    def __init__(self) -> None:
        self._graph: nx.DiGraph = nx.DiGraph()

    @classmethod
    def from_records(cls, records: Iterable[PackageRecord]) -> "DependencyGraph":
        graph = cls()
        for record in records:
            graph.add_package(record.name)
            for dependency in record.dependencies:
                graph.add_dependency(record.name, dependency)
        return graph

    def add_package(self, name: str) -> None:
        self._graph.add_node(name)

    def add_dependency(self, package: str, dependency: str) -> None:
        """Record that ``package`` depends on ``dependency``."""
        self._graph.add_edge(package, dependency)

    def get_dependents(self, name: str) -> List[str]:
        """Packages that depend on ``name``."""
        if name not in self._graph:
            return []
        return sorted(self._graph.predecessors(name))

    def get_dependencies(self, name: str) -> List[str]:
        """Packages ``name`` depends on."""
        if name not in self._graph:
            return []
        return sorted(self._graph.successors(name))

    def __contains__(self, name: object) -> bool:
        return name in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    @staticmethod
    def detect_conflicts(records: Sequence[PackageRecord]) -> List[Conflict]:
        """One :class:`Conflict` per (package, dependency) with a pending upgrade.

        A dependency has a pending upgrade when its ``latest_version``
        orders after its ``current_version``. Dependencies that are not in
        ``records`` are ignored.
        """
        graph = DependencyGraph.from_records(records)
        by_name: Dict[str, PackageRecord] = {record.name: record for record in records}
        conflicts: List[Conflict] = []

        for record in records:
            for dependency in graph.get_dependencies(record.name):
                dep_record = by_name.get(dependency)
                if dep_record is None or not dep_record.latest_version:
                    continue

                latest = dep_record.latest_version
                if not is_newer(dep_record.current_version, latest):
                    continue

                conflicts.append(
                    Conflict(
                        package=record.name,
                        reason=(
                            f"Requires {dependency} but upgrade to {latest} "
                            "may break compatibility"
                        ),
                        current=dep_record.current_version,
                        required=latest,
                    )
                )

        if conflicts:
            logger.debug("Detected %d potential conflict(s)", len(conflicts))
        return conflicts
