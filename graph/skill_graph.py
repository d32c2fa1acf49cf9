"""
skill_graph.py
Directed endorsement graph: who vouches for whose skill, and how strongly.
 - nodes live in a dense arena (insertion order), with an id -> index lookup
 - one edge per ordered (source, target) pair; re-linking replaces the weight
 - edge weight comes from the level tier table (basic / intermediate / advanced)
Ranking reads the graph through adjacency_arrays() and never mutates edge weights.
"""
import logging
from dataclasses import dataclass

import networkx as nx
import numpy as np
import pandas as pd

from ranker.config import LEVEL_MAP, UNKNOWN_LEVEL_POLICIES, validate_levels
from ranker.errors import InvalidParameterError, UnknownLevelError

logger = logging.getLogger(__name__)

MAX_NODE_ID = 2 ** 32 - 1


@dataclass
class Node:
    id: int
    weight: float = 0.0  # rank mass, written by the rank engine
    outbound: float = 0.0  # sum of current outgoing edge weights


def _check_id(node_id):
    if isinstance(node_id, bool):
        raise InvalidParameterError(f"node id must be an integer, got {node_id!r}")
    try:
        nid = int(node_id)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"node id must be an integer, got {node_id!r}")
    if nid != node_id or not 0 <= nid <= MAX_NODE_ID:
        raise InvalidParameterError(f"node id must be an integer in [0, {MAX_NODE_ID}], got {node_id!r}")
    return nid


class SkillGraph:
    def __init__(self, levels=None, unknown_level=None):
        self.levels = validate_levels(levels) if levels is not None else dict(LEVEL_MAP)
        self.unknown_level = unknown_level if unknown_level is not None else "zero"
        if self.unknown_level not in UNKNOWN_LEVEL_POLICIES:
            raise InvalidParameterError(
                f"unknown_level must be one of {UNKNOWN_LEVEL_POLICIES}, got {unknown_level!r}")
        self.reset()

    @classmethod
    def from_config(cls, conf):
        return cls(levels=conf.get("levels"), unknown_level=conf.get("unknown_level"))

    def reset(self):
        """Drop every node and edge."""
        self._nodes = []
        self._index = {}
        self._edges = []  # _edges[source_idx] = {target_idx: weight}

    # ---- tiers ----
    def tier_weight(self, level):
        if level in self.levels:
            return self.levels[level]
        if self.unknown_level == "reject":
            raise UnknownLevelError(level, self.levels)
        if self.unknown_level == "lowest":
            w = min(self.levels.values())
        else:
            w = 0.0
        logger.warning("unknown level %r, using weight %s", level, w)
        return w

    # ---- mutation ----
    def _ensure(self, node_id):
        idx = self._index.get(node_id)
        if idx is None:
            idx = len(self._nodes)
            self._index[node_id] = idx
            self._nodes.append(Node(node_id))
            self._edges.append({})
        return idx

    def link(self, source, target, level):
        """
        Create (or replace) the edge source -> target with the tier weight of `level`.
        Both endpoints are created on first reference.
        """
        source = _check_id(source)
        target = _check_id(target)
        weight = self.tier_weight(level)

        s = self._ensure(source)
        t = self._ensure(target)
        node = self._nodes[s]
        out = self._edges[s]
        if t in out:
            # replacing an edge: recount from the stored weights so no float residue is left
            out[t] = weight
            node.outbound = sum(out.values())
        else:
            out[t] = weight
            node.outbound += weight

    def _dangling(self, s):
        """True when node index s has no positive outgoing weight."""
        return not any(w > 0 for w in self._edges[s].values())

    # ---- read access ----
    def __len__(self):
        return len(self._nodes)

    def __contains__(self, node_id):
        return node_id in self._index

    def __iter__(self):
        return iter(self.node_ids())

    def node_ids(self):
        return [n.id for n in self._nodes]

    def node(self, node_id):
        return self._nodes[self._index[node_id]]

    def outbound(self, node_id):
        return self.node(node_id).outbound

    def edge_weight(self, source, target):
        """Stored (un-normalized) weight, or None if the edge does not exist."""
        s = self._index.get(source)
        t = self._index.get(target)
        if s is None or t is None:
            return None
        return self._edges[s].get(t)

    def out_edges(self, node_id):
        out = self._edges[self._index[node_id]]
        return {self._nodes[t].id: w for t, w in out.items()}

    def edges(self):
        """Yield (source_id, target_id, weight) in insertion order."""
        for s, out in enumerate(self._edges):
            sid = self._nodes[s].id
            for t, w in out.items():
                yield sid, self._nodes[t].id, w

    def num_edges(self):
        return sum(len(out) for out in self._edges)

    def normalized_edges(self):
        """
        {source_id: {target_id: probability}} where each non-dangling source sums to 1.
        Dangling sources (no positive outgoing weight) keep their stored weights.
        """
        result = {}
        for s, out in enumerate(self._edges):
            if not out:
                continue
            total = self._nodes[s].outbound
            src = self._nodes[s].id
            if not self._dangling(s):
                result[src] = {self._nodes[t].id: w / total for t, w in out.items()}
            else:
                result[src] = {self._nodes[t].id: w for t, w in out.items()}
        return result

    def adjacency_arrays(self):
        """
        Index-space view used by the rank engine:
        rows, cols (int arrays), probs (normalized weights), dangling (bool mask per node).
        """
        n_edges = self.num_edges()
        rows = np.empty(n_edges, dtype=np.int64)
        cols = np.empty(n_edges, dtype=np.int64)
        probs = np.empty(n_edges, dtype=np.float64)
        i = 0
        for s, out in enumerate(self._edges):
            total = self._nodes[s].outbound
            dangling_source = self._dangling(s)
            for t, w in out.items():
                rows[i] = s
                cols[i] = t
                probs[i] = w if dangling_source else w / total
                i += 1
        dangling = np.array([self._dangling(s) for s in range(len(self._nodes))], dtype=bool)
        return rows, cols, probs, dangling

    def to_networkx(self):
        G = nx.DiGraph()
        for n in self._nodes:
            G.add_node(n.id, rank=n.weight, outbound=n.outbound)
        for s, t, w in self.edges():
            G.add_edge(s, t, weight=w)
        return G


def create_graph(conf=None):
    if conf is None:
        return SkillGraph()
    return SkillGraph.from_config(conf)


def build_skill_graph(endorsements_df, graph=None, source_col="source_id", target_col="target_id",
                      level_col="level"):
    """
    Link every row of an endorsements DataFrame (source_col endorses target_col at level_col).
    Rows with a missing id are skipped. Returns the graph.
    """
    missing = [c for c in (source_col, target_col, level_col) if c not in endorsements_df.columns]
    if missing:
        raise ValueError(f"endorsements frame is missing columns: {missing}")
    G = graph if graph is not None else SkillGraph()

    skipped = 0
    for _, r in endorsements_df.iterrows():
        if pd.isna(r[source_col]) or pd.isna(r[target_col]):
            skipped += 1
            continue
        level = r[level_col]
        if pd.isna(level):
            level = ""
        G.link(r[source_col], r[target_col], str(level).strip())
    if skipped:
        logger.warning("skipped %d endorsement rows with a missing id", skipped)
    logger.info("built skill graph: %d nodes, %d edges", len(G), G.num_edges())
    return G
