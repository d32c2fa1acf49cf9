import json
import math

import pytest

from graph.skill_graph import SkillGraph
from ranker.errors import EmptyGraphError
from ranker.export import rank_as_json, ranks_to_frame


def test_rank_as_json_singleton_text():
    G = SkillGraph()
    G.link(7, 7, "basic")
    assert rank_as_json(G, 0.85, 1e-6) == '{"7": 1.000000}'


def test_rank_as_json_two_nodes_text():
    G = SkillGraph()
    G.link(1, 2, "basic")
    # 1/2.85 and 1.85/2.85
    assert rank_as_json(G, 0.85, 1e-9) == '{"1": 0.350877, "2": 0.649123}'


def test_rank_as_json_is_valid_object():
    G = SkillGraph()
    G.link(10, 20, "basic")
    G.link(20, 30, "advanced")
    G.link(30, 10, "intermediate")
    G.link(40, 10, "whatever")

    text = rank_as_json(G, 0.85, 1e-6)
    parsed = json.loads(text)

    assert set(parsed) == {"10", "20", "30", "40"}
    assert all(math.isfinite(v) for v in parsed.values())
    assert not text.endswith(", }")
    assert sum(parsed.values()) == pytest.approx(1.0, abs=1e-5)


def test_rank_as_json_empty_graph_raises():
    with pytest.raises(EmptyGraphError):
        rank_as_json(SkillGraph(), 0.85, 1e-6)


def test_ranks_to_frame_sorted():
    df = ranks_to_frame({3: 0.2, 1: 0.5, 2: 0.2, 4: 0.1})

    assert list(df.columns) == ["node_id", "rank"]
    assert df["node_id"].tolist() == [1, 2, 3, 4]
    assert df["rank"].tolist() == [0.5, 0.2, 0.2, 0.1]


def test_ranks_to_frame_empty():
    df = ranks_to_frame({})
    assert df.empty
    assert list(df.columns) == ["node_id", "rank"]
