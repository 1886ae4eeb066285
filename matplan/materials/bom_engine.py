"""
matplan - BOM Engine
====================

Bill of Materials (BOM) graph and explosion.

Features:
- Structural validation (quantities, scrap factors, lead times)
- Cycle detection before any traversal
- Low-level codes (processing order for MRP)
- Single and multi-level BOM explosion
- Cumulative lead time (critical path)

Modelo:
    Necessidade do componente = Qtd pai × quantity_per × scrap_factor
    Low-level code(i)         = 1 + max(low-level code dos pais), raízes = 0
    Lead time cumulativo      = max sobre caminhos raiz→folha de Σ lead times
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pandas as pd

from matplan.errors import BOMCycleError, PlanningInputError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BOMEdge:
    """Parent -> component relationship."""
    parent: str
    component: str
    quantity_per: float  # Quantity of component per unit of parent
    scrap_factor: float = 1.0  # 1.0 = no scrap, 1.05 = 5% scrap
    lead_time: int = 0  # Lead time of the component, in periods
    level: int = 0  # As supplied; the engine recomputes low-level codes

    @property
    def extended_quantity_per(self) -> float:
        return self.quantity_per * self.scrap_factor

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parent": self.parent,
            "component": self.component,
            "quantity_per": float(self.quantity_per),
            "scrap_factor": float(self.scrap_factor),
            "lead_time": self.lead_time,
            "level": self.level,
        }


@dataclass(frozen=True)
class ExplodedRequirement:
    """Result of BOM explosion for a single component."""
    component: str
    parent: str
    quantity: float
    level: int  # 1 = direct child of the exploded item
    lead_time: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "parent": self.parent,
            "quantity": float(self.quantity),
            "level": self.level,
            "lead_time": self.lead_time,
        }


@dataclass(frozen=True)
class CriticalPath:
    """Longest cumulative lead time path below an item."""
    item: str
    total_lead_time: int
    path: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item,
            "total_lead_time": self.total_lead_time,
            "path": list(self.path),
        }


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

def validate_edges(edges: Iterable[BOMEdge]) -> List[str]:
    """
    Validate edge values.

    Returns list of validation errors (empty when valid).
    """
    errors: List[str] = []
    for edge in edges:
        label = f"{edge.parent} -> {edge.component}"
        if not edge.parent or not edge.component:
            errors.append(f"BOM edge {label}: parent and component are required")
        if not edge.quantity_per > 0:
            errors.append(f"BOM edge {label}: quantity_per must be > 0 (got {edge.quantity_per})")
        if not edge.scrap_factor >= 1.0:
            errors.append(f"BOM edge {label}: scrap_factor must be >= 1.0 (got {edge.scrap_factor})")
        if edge.lead_time < 0:
            errors.append(f"BOM edge {label}: lead_time must be >= 0 (got {edge.lead_time})")
        if edge.level < 0:
            errors.append(f"BOM edge {label}: level must be >= 0 (got {edge.level})")
    return errors


# ═══════════════════════════════════════════════════════════════════════════════
# BOM GRAPH
# ═══════════════════════════════════════════════════════════════════════════════

class BOMGraph:
    """
    Immutable view over a BOM edge set.

    Construction validates edge values and acyclicity, so every traversal
    method can assume a DAG.
    """

    def __init__(self, edges: Iterable[BOMEdge]):
        self.edges: Tuple[BOMEdge, ...] = tuple(edges)

        errors = validate_edges(self.edges)
        if errors:
            raise PlanningInputError(f"Invalid BOM ({len(errors)} errors)", errors)

        self._children: Dict[str, List[BOMEdge]] = defaultdict(list)
        self._parents: Dict[str, List[BOMEdge]] = defaultdict(list)
        for edge in self.edges:
            self._children[edge.parent].append(edge)
            self._parents[edge.component].append(edge)

        cycle = self.find_cycle()
        if cycle:
            raise BOMCycleError(cycle)

        logger.debug(f"BOM graph built: {len(self.items)} items, {len(self.edges)} edges")

    # ───────────────────────────────────────────────────────────────────────────
    # Structure
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def items(self) -> List[str]:
        seen: Dict[str, None] = {}
        for edge in self.edges:
            seen.setdefault(edge.parent)
            seen.setdefault(edge.component)
        return list(seen)

    def children(self, item: str) -> List[BOMEdge]:
        return list(self._children.get(item, []))

    def parents(self, item: str) -> List[BOMEdge]:
        return list(self._parents.get(item, []))

    def is_leaf(self, item: str) -> bool:
        return not self._children.get(item)

    def lead_time_of(self, item: str) -> Optional[int]:
        """Largest lead time on edges where the item is the component."""
        incoming = self._parents.get(item)
        if not incoming:
            return None
        return max(edge.lead_time for edge in incoming)

    def find_cycle(self) -> Optional[List[str]]:
        """
        Iterative DFS with colouring.

        Returns the first cycle found as a closed path (first == last), or None.
        """
        white, grey, black = 0, 1, 2
        colour: Dict[str, int] = defaultdict(int)

        for start in self.items:
            if colour[start] != white:
                continue
            colour[start] = grey
            path = [start]
            stack = [iter(self._children.get(start, []))]

            while stack:
                edge = next(stack[-1], None)
                if edge is None:
                    stack.pop()
                    colour[path.pop()] = black
                    continue
                child = edge.component
                if colour[child] == grey:
                    return path[path.index(child):] + [child]
                if colour[child] == white:
                    colour[child] = grey
                    path.append(child)
                    stack.append(iter(self._children.get(child, [])))

        return None

    def reachable_from(self, roots: Iterable[str]) -> List[str]:
        """Items reachable from the roots (roots included), in discovery order."""
        order: List[str] = []
        seen: Set[str] = set()
        pending = deque(roots)
        while pending:
            item = pending.popleft()
            if item in seen:
                continue
            seen.add(item)
            order.append(item)
            for edge in self._children.get(item, []):
                if edge.component not in seen:
                    pending.append(edge.component)
        return order

    def topological_order(self, roots: Optional[Iterable[str]] = None) -> List[str]:
        """
        Parents before components (Kahn's algorithm).

        With roots given, only the subgraph reachable from them is ordered.
        """
        scope = self.reachable_from(roots) if roots is not None else self.items
        in_scope = set(scope)

        indegree: Dict[str, int] = {item: 0 for item in scope}
        for item in scope:
            for edge in self._children.get(item, []):
                if edge.component in in_scope:
                    indegree[edge.component] += 1

        order: List[str] = []
        queue = deque(item for item in scope if indegree[item] == 0)
        while queue:
            item = queue.popleft()
            order.append(item)
            for edge in self._children.get(item, []):
                child = edge.component
                if child not in in_scope:
                    continue
                indegree[child] -= 1
                if indegree[child] == 0:
                    queue.append(child)

        return order

    def low_level_codes(self, roots: Optional[Iterable[str]] = None) -> Dict[str, int]:
        """
        Compute low-level codes.

        With roots given, only the subgraph reachable from them is coded and
        only parents inside that subgraph count.

        Returns dict of {item: level}
        """
        order = self.topological_order(roots)
        in_scope = set(order)

        # Longest path from the roots
        levels: Dict[str, int] = {item: 0 for item in order}
        for item in order:
            for edge in self._children.get(item, []):
                if edge.component in in_scope:
                    levels[edge.component] = max(levels[edge.component], levels[item] + 1)

        return levels

    def items_by_level(self, roots: Optional[Iterable[str]] = None) -> Dict[int, List[str]]:
        """
        Group items by low-level code.

        Items inside one level never depend on each other and can be netted
        concurrently; levels must be processed in ascending order.
        """
        grouped: Dict[int, List[str]] = defaultdict(list)
        for item, level in self.low_level_codes(roots).items():
            grouped[level].append(item)
        return {level: sorted(grouped[level]) for level in sorted(grouped)}

    # ───────────────────────────────────────────────────────────────────────────
    # Explosion
    # ───────────────────────────────────────────────────────────────────────────

    def explode(self, parent: str, quantity: float) -> List[ExplodedRequirement]:
        """Single-level explosion."""
        return [
            ExplodedRequirement(
                component=edge.component,
                parent=parent,
                quantity=quantity * edge.extended_quantity_per,
                level=1,
                lead_time=edge.lead_time,
            )
            for edge in self._children.get(parent, [])
        ]

    def explode_multi_level(
        self,
        item: str,
        quantity: float,
        max_level: int = 10,
    ) -> List[ExplodedRequirement]:
        """
        Multi-level explosion (depth-first, one entry per BOM path).

        Args:
            item: Item to explode
            quantity: Required quantity of the item
            max_level: Deepest level to report

        Returns:
            List of ExplodedRequirement for all components
        """
        requirements: List[ExplodedRequirement] = []
        cut: List[str] = []

        if max_level < 1:
            if self._children.get(item):
                cut.append(item)
            stack = []
        else:
            stack = [(item, quantity, 1, iter(self._children.get(item, [])))]

        # Explicit stack keeps depth-first order without recursion
        while stack:
            parent, parent_qty, level, edges = stack[-1]
            edge = next(edges, None)
            if edge is None:
                stack.pop()
                continue
            child_qty = parent_qty * edge.extended_quantity_per
            requirements.append(ExplodedRequirement(
                component=edge.component,
                parent=parent,
                quantity=child_qty,
                level=level,
                lead_time=edge.lead_time,
            ))
            grandchildren = self._children.get(edge.component)
            if not grandchildren:
                continue
            if level >= max_level:
                cut.append(edge.component)
                continue
            stack.append((edge.component, child_qty, level + 1, iter(grandchildren)))

        if cut:
            logger.warning(
                f"Max BOM levels ({max_level}) exceeded below {item}: "
                f"explosion cut at {len(cut)} components ({', '.join(sorted(set(cut)))})"
            )
        return requirements

    def leaf_requirements(self, item: str, quantity: float) -> Dict[str, float]:
        """
        Aggregated requirements of raw materials (leaf items).

        Quantities are pushed down in topological order, so every edge is
        visited once.
        """
        required: Dict[str, float] = defaultdict(float)
        required[item] = quantity
        order = self.topological_order([item])
        for node in order:
            for edge in self._children.get(node, []):
                required[edge.component] += required[node] * edge.extended_quantity_per
        return {
            node: required[node]
            for node in order
            if node != item and self.is_leaf(node)
        }

    def cumulative_lead_time(self, item: str) -> CriticalPath:
        """
        Longest lead time path from the item down to any leaf.

        The item contributes its own lead time (largest incoming edge lead
        time, 0 if it is never a component); each edge below adds the
        component's lead time.

        Longest-path DP in reverse topological order: each node keeps the
        best total below it and the component that achieves it (first edge
        wins on ties).
        """
        below: Dict[str, int] = {}
        successor: Dict[str, Optional[str]] = {}
        for node in reversed(self.topological_order([item])):
            best_total: Optional[int] = None
            best_child: Optional[str] = None
            for edge in self._children.get(node, []):
                total = edge.lead_time + below[edge.component]
                if best_total is None or total > best_total:
                    best_total = total
                    best_child = edge.component
            below[node] = best_total or 0
            successor[node] = best_child

        path: List[str] = [item]
        while successor[path[-1]] is not None:
            path.append(successor[path[-1]])

        own = self.lead_time_of(item) or 0
        return CriticalPath(item=item, total_lead_time=int(own + below[item]), path=tuple(path))

    def to_dataframe(self, item: str, quantity: float = 1.0, max_level: int = 10) -> pd.DataFrame:
        """Export multi-level explosion to DataFrame."""
        requirements = self.explode_multi_level(item, quantity, max_level)
        return pd.DataFrame(
            [req.to_dict() for req in requirements],
            columns=["component", "parent", "quantity", "level", "lead_time"],
        )


# ═══════════════════════════════════════════════════════════════════════════════
# CONVENIENCE FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════════

def explode_bom(edges: Iterable[BOMEdge], parent: str, quantity: float) -> List[ExplodedRequirement]:
    """Single-level BOM explosion."""
    return BOMGraph(edges).explode(parent, quantity)


def explode_bom_multi_level(
    edges: Iterable[BOMEdge],
    item: str,
    quantity: float,
    max_level: Optional[int] = None,
) -> List[ExplodedRequirement]:
    """Multi-level BOM explosion, cut at the configured depth."""
    if max_level is None:
        from matplan.config import get_config
        max_level = get_config().max_explosion_levels
    return BOMGraph(edges).explode_multi_level(item, quantity, max_level)


def cumulative_lead_time(edges: Iterable[BOMEdge], item: str) -> CriticalPath:
    """Critical path (longest cumulative lead time) below an item."""
    return BOMGraph(edges).cumulative_lead_time(item)
