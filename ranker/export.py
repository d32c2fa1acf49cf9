"""
Result views over a rank run:
 - rank_as_json: {"<id>": <rank>, ...} text, six decimals, callback order
 - ranks_to_frame: pandas DataFrame sorted by rank
"""
import pandas as pd

from ranker.rank import rank


def rank_as_json(graph, alpha=None, epsilon=None, max_iter=None):
    entries = []
    rank(graph, alpha, epsilon, max_iter=max_iter, on_result=lambda nid, r: entries.append(f"\"{nid}\": {r:f}"))
    return "{" + ", ".join(entries) + "}"


def ranks_to_frame(ranks):
    df = pd.DataFrame({"node_id": list(ranks.keys()), "rank": list(ranks.values())},
                      columns=["node_id", "rank"])
    df["node_id"] = df["node_id"].astype("int64")
    df["rank"] = df["rank"].astype(float)
    return df.sort_values(["rank", "node_id"], ascending=[False, True]).reset_index(drop=True)
