"""Provenance graph of the sketch search tree."""

import networkx as nx

from sketchtune.state import SearchState


class SearchTrace(nx.DiGraph):
    """Directed graph of parent -> child state transitions.

    Nodes are keyed by ``id(state)`` and keep the state alive in the
    ``state`` attribute; edges carry the name of the rule that produced the
    child.
    """

    def add_state(self, state: SearchState) -> int:
        """Register a state as a node and return its key."""
        key = id(state)
        if key not in self:
            self.add_node(key, state=state, program_hash=state.program_hash())
        return key

    def record(self, parent: SearchState, child: SearchState, rule_name: str) -> None:
        """Record that ``rule_name`` turned ``parent`` into ``child``."""
        self.add_edge(self.add_state(parent), self.add_state(child), rule=rule_name)

    def roots(self) -> list[SearchState]:
        """Return states with no recorded parent."""
        return [self.nodes[key]["state"] for key in self if self.in_degree(key) == 0]

    def lineage(self, state: SearchState) -> list[str]:
        """Return the rule names applied from a root to ``state``, oldest first.

        Raises:
            KeyError: If the state was never recorded.
        """
        key = id(state)
        if key not in self:
            raise KeyError(f"State {state!r} is not part of the trace")
        rules: list[str] = []
        while True:
            parents = list(self.predecessors(key))
            if not parents:
                break
            parent = parents[0]
            rules.append(self.edges[parent, key]["rule"])
            key = parent
        return rules[::-1]
