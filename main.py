"""
main.py - runner to load an endorsements CSV, build the skill graph, and rank it.
Usage: python main.py [endorsements.csv] [top_k]
The CSV needs source_id, target_id, level columns.
"""
import os
import sys
import logging

import pandas as pd

from graph.skill_graph import SkillGraph, build_skill_graph
from ranker.config import BASE, load_config
from ranker.export import ranks_to_frame
from ranker.rank import RankEngine


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=os.environ.get("SKILLRANK_LOG_LEVEL", "INFO"),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    csv_path = argv[0] if argv else os.path.join(BASE, "endorsements.csv")
    top_k = int(argv[1]) if len(argv) > 1 else 10

    conf = load_config()
    endorsements = pd.read_csv(csv_path)
    print("Loaded endorsements:", len(endorsements))

    G = build_skill_graph(endorsements, graph=SkillGraph.from_config(conf))
    engine = RankEngine.from_config(conf)
    ranks = engine.rank(G)

    print(f"Ranked {len(G)} nodes in {engine.iterations} iterations")
    print("Top nodes (node_id, rank):")
    for row in ranks_to_frame(ranks).head(top_k).itertuples(index=False):
        print(row.node_id, round(row.rank, 6))
    return 0


if __name__ == "__main__":
    sys.exit(main())
