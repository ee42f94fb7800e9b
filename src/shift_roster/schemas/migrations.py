"""Document migrations as a directed graph of version edges."""

from __future__ import annotations

import copy
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable

from shift_roster.models.document import DocumentIssue, IssueKind, MigrationResult
from shift_roster.schemas.versioning import CURRENT_VERSION, OLDEST_VERSION, SemanticVersion

logger = logging.getLogger(__name__)

# Pure transformation from one document version's mapping to the next
MigrationFunction = Callable[[dict[str, Any]], dict[str, Any]]

DEFAULT_METADATA: dict[str, str] = {"creator": "unknown", "department": "default"}


@dataclass(frozen=True)
class MigrationEdge:
    source: str
    target: str
    fn: MigrationFunction

    @property
    def name(self) -> str:
        return f"{self.source}->{self.target}"

    def apply(self, data: dict[str, Any]) -> dict[str, Any]:
        return self.fn(data)


def compose(*functions: MigrationFunction) -> MigrationFunction:
    """Chain migration functions left to right."""

    def composed(data: dict[str, Any]) -> dict[str, Any]:
        for fn in functions:
            data = fn(data)
        return data

    return composed


class MigrationGraph:
    """Forward-only migration edges between document versions."""

    def __init__(self) -> None:
        self._edges: dict[str, dict[str, MigrationEdge]] = {}

    def register(self, source: str, target: str, fn: MigrationFunction) -> MigrationEdge:
        if SemanticVersion.parse(target) <= SemanticVersion.parse(source):
            raise ValueError(f"Migration {source}->{target} must move forward")
        outgoing = self._edges.setdefault(source, {})
        if target in outgoing:
            raise ValueError(f"Migration {source}->{target} is already registered")
        edge = MigrationEdge(source, target, fn)
        outgoing[target] = edge
        return edge

    def edge(self, source: str, target: str) -> MigrationEdge | None:
        return self._edges.get(source, {}).get(target)

    def edges(self) -> list[MigrationEdge]:
        return [edge for outgoing in self._edges.values() for edge in outgoing.values()]

    def find_path(self, source: str, target: str) -> list[MigrationEdge] | None:
        """Shortest edge sequence from ``source`` to ``target`` (breadth-first)."""
        if source == target:
            return []
        previous: dict[str, MigrationEdge] = {}
        queue = deque([source])
        visited = {source}
        while queue:
            node = queue.popleft()
            outgoing = self._edges.get(node, {})
            # Deterministic order: nearest version first
            for nxt in sorted(outgoing, key=SemanticVersion.parse):
                if nxt in visited:
                    continue
                visited.add(nxt)
                previous[nxt] = outgoing[nxt]
                if nxt == target:
                    path: list[MigrationEdge] = []
                    while nxt != source:
                        edge = previous[nxt]
                        path.append(edge)
                        nxt = edge.source
                    return list(reversed(path))
                queue.append(nxt)
        return None

    def migrate(self, data: dict[str, Any], target: str = CURRENT_VERSION) -> MigrationResult:
        """Upgrade ``data`` to ``target``; the input mapping is never modified."""
        source = data.get("version") or OLDEST_VERSION

        if source == target:
            return MigrationResult(success=True, data=data)

        try:
            source_ver = SemanticVersion.parse(source)
            target_ver = SemanticVersion.parse(target)
        except ValueError as exc:
            return self._failure(IssueKind.NO_MIGRATION_PATH, str(exc), source, target)

        if source_ver > target_ver:
            return self._failure(
                IssueKind.DOWNGRADE_ATTEMPTED,
                f"無法從較新版本 {source} 降級到 {target}",
                source,
                target,
            )

        direct = self.edge(source, target)
        path = [direct] if direct is not None else self.find_path(source, target)
        if path is None:
            return self._failure(
                IssueKind.NO_MIGRATION_PATH,
                f"沒有找到從 {source} 到 {target} 的遷移路徑",
                source,
                target,
            )

        migrated = copy.deepcopy(data)
        for edge in path:
            logger.debug("Applying migration %s", edge.name)
            migrated = edge.apply(migrated)
        return MigrationResult(success=True, data=migrated, steps=[e.name for e in path])

    @staticmethod
    def _failure(kind: IssueKind, message: str, source: str, target: str) -> MigrationResult:
        logger.warning("Migration %s->%s failed: %s", source, target, kind.value)
        return MigrationResult(
            success=False,
            error=DocumentIssue(
                kind=kind,
                message=f"版本遷移失敗: {message}",
                declared_version=source,
                target_version=target,
            ),
        )


def add_overtime_period(data: dict[str, Any]) -> dict[str, Any]:
    """1.0.0 -> 1.1.0: overtime becomes valid; existing roster data is unchanged."""
    return {**data, "version": "1.1.0"}


def add_metadata_block(data: dict[str, Any]) -> dict[str, Any]:
    """1.1.0 -> 1.2.0: adds the optional metadata block with defaults."""
    migrated = {**data, "version": "1.2.0"}
    if not isinstance(migrated.get("metadata"), dict):
        migrated["metadata"] = dict(DEFAULT_METADATA)
    return migrated


# Global graph instance
_global_graph: MigrationGraph | None = None


def get_migration_graph() -> MigrationGraph:
    """Get the global migration graph, initializing if needed."""
    global _global_graph
    if _global_graph is None:
        _global_graph = _create_default_graph()
    return _global_graph


def _create_default_graph() -> MigrationGraph:
    graph = MigrationGraph()
    graph.register("1.0.0", "1.1.0", add_overtime_period)
    graph.register("1.1.0", "1.2.0", add_metadata_block)
    # Shortcut for the most common upgrade
    graph.register("1.0.0", "1.2.0", compose(add_overtime_period, add_metadata_block))
    return graph


def migrate_to_latest(
    data: dict[str, Any],
    target: str = CURRENT_VERSION,
    graph: MigrationGraph | None = None,
) -> MigrationResult:
    return (graph or get_migration_graph()).migrate(data, target)
