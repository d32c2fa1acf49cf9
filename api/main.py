import threading

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse

from graph.skill_graph import SkillGraph
from ranker.config import load_config
from ranker.errors import SkillRankError
from ranker.export import rank_as_json, ranks_to_frame
from ranker.rank import rank

CONF = load_config()
# requests must not spin forever while holding the graph lock
MAX_ITER = CONF["max_iter"] or 10_000

app = FastAPI(
    title="SkillRank API",
    description="PageRank-style importance over skill endorsements",
    version="1.0"
)

# one in-memory graph per process; the library does no locking of its own
_graph = SkillGraph.from_config(CONF)
_lock = threading.Lock()


@app.get("/health")
def health():
    with _lock:
        return {"status": "ok", "nodes": len(_graph), "edges": _graph.num_edges()}


@app.post("/link")
def link_api(
    source: int = Query(..., ge=0),
    target: int = Query(..., ge=0),
    level: str = Query(...)
):
    try:
        with _lock:
            _graph.link(source, target, level)
            weight = _graph.edge_weight(source, target)
    except SkillRankError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"source": source, "target": target, "level": level, "weight": weight}


@app.post("/reset")
def reset_api():
    with _lock:
        _graph.reset()
    return {"status": "ok"}


@app.get("/rank")
def rank_api(
    alpha: float = Query(CONF["alpha"], ge=0, le=1),
    epsilon: float = Query(CONF["epsilon"], gt=0),
    top_k: int | None = Query(None, ge=1)
):
    try:
        with _lock:
            ranks = rank(_graph, alpha, epsilon, max_iter=MAX_ITER)
    except SkillRankError as e:
        raise HTTPException(status_code=400, detail=str(e))
    df = ranks_to_frame(ranks)
    if top_k is not None:
        df = df.head(top_k)
    return [
        {"node_id": int(r.node_id), "rank": float(r.rank)}
        for r in df.itertuples(index=False)
    ]


@app.get("/rank/json", response_class=PlainTextResponse)
def rank_json_api(
    alpha: float = Query(CONF["alpha"], ge=0, le=1),
    epsilon: float = Query(CONF["epsilon"], gt=0)
):
    try:
        with _lock:
            return rank_as_json(_graph, alpha, epsilon, max_iter=MAX_ITER)
    except SkillRankError as e:
        raise HTTPException(status_code=400, detail=str(e))
