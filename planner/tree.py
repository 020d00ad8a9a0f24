"""
planner/tree.py
===============
Arena of search nodes for one planning call.

Nodes are stored in a flat list and refer to each other by index; a child
keeps its parent's index only for backpropagation.  The whole arena is
dropped once the root action has been chosen.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sim.physics import Action, State


@dataclass
class SearchNode:
    index: int
    parent: Optional[int]
    action: Optional[Action]
    depth: int
    state: State
    reward: float = 0.0
    """Discounted reward of the transition that produced this node."""

    terminal: bool = False
    untried: List[Tuple[Action, State]] = field(default_factory=list)
    """Valid manoeuvres not yet expanded, with their successor states."""

    children: Dict[Action, int] = field(default_factory=dict)
    visits: int = 0
    value: float = 0.0

    @property
    def mean_value(self) -> float:
        return self.value / self.visits if self.visits else 0.0

    @property
    def fully_expanded(self) -> bool:
        return not self.untried


class SearchTree:
    """Flat node arena rooted at index 0."""

    def __init__(self, root_state: State) -> None:
        self.nodes: List[SearchNode] = [
            SearchNode(index=0, parent=None, action=None, depth=0, state=root_state)
        ]

    @property
    def root(self) -> SearchNode:
        return self.nodes[0]

    def __len__(self) -> int:
        return len(self.nodes)

    def add_child(
        self,
        parent: SearchNode,
        action: Action,
        state: State,
        reward: float,
        terminal: bool,
    ) -> SearchNode:
        child = SearchNode(
            index=len(self.nodes),
            parent=parent.index,
            action=action,
            depth=parent.depth + 1,
            state=state,
            reward=reward,
            terminal=terminal,
        )
        self.nodes.append(child)
        parent.children[action] = child.index
        return child

    def children_of(self, node: SearchNode) -> List[SearchNode]:
        """Children in manoeuvre priority order."""
        return [self.nodes[node.children[a]] for a in sorted(node.children, key=lambda a: a.value)]

    def path_reward(self, index: int) -> float:
        """Sum of the transition rewards from the root down to *index*."""
        total = 0.0
        node: Optional[SearchNode] = self.nodes[index]
        while node is not None:
            total += node.reward
            node = self.nodes[node.parent] if node.parent is not None else None
        return total

    def backpropagate(self, index: int, value: float) -> None:
        node: Optional[SearchNode] = self.nodes[index]
        while node is not None:
            node.visits += 1
            node.value += value
            node = self.nodes[node.parent] if node.parent is not None else None

    # ── selection helpers ─────────────────────────────────────────────────

    def ucb_child(self, node: SearchNode, c: float) -> SearchNode:
        """Child maximising ``mean + c * sqrt(ln N / n)``.

        Ties keep the earlier manoeuvre in priority order.
        """
        children = self.children_of(node)
        if not children:
            raise ValueError(f"node {node.index} has no children to select from")
        log_n = math.log(max(node.visits, 1))
        # max() keeps the first of equal scores.
        return max(
            children,
            key=lambda child: child.mean_value + c * math.sqrt(log_n / max(child.visits, 1)),
        )

    def best_child(self, node: SearchNode) -> Optional[SearchNode]:
        """Most visited child; ties by higher mean, then priority order."""
        best: Optional[SearchNode] = None
        for child in self.children_of(node):
            if best is None or (child.visits, child.mean_value) > (best.visits, best.mean_value):
                best = child
        return best

    def best_root_action(self) -> Optional[Action]:
        child = self.best_child(self.root)
        return child.action if child is not None else None

    def principal_variation(self) -> List[State]:
        """States along the most visited path, starting with the root."""
        states = [self.root.state]
        node = self.best_child(self.root)
        while node is not None:
            states.append(node.state)
            node = self.best_child(node)
        return states
