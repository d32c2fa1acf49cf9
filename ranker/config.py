"""
ranker/config.py

Defaults for the rank engine and the skill graph, optionally overridden by
a JSON file:
 - $SKILLRANK_CONF if set
 - otherwise skillrank_conf.json inside $SKILLRANK_BASE (default: cwd)

Example skillrank_conf.json:
    {"alpha": 0.9, "epsilon": 1e-8, "levels": {"basic": 1, "expert": 8}}
"""
import os
import json
import math
import logging

from ranker.errors import ConfigError

logger = logging.getLogger(__name__)

BASE = os.environ.get("SKILLRANK_BASE", os.getcwd())

# "basic" = 1.0, "intermediate" = 2.0, "advanced" = 4.0
LEVEL_MAP = {"basic": 1.0, "intermediate": 2.0, "advanced": 4.0}

UNKNOWN_LEVEL_POLICIES = ("zero", "lowest", "reject")

DEFAULT_CONF = {
    "alpha": 0.85,
    "epsilon": 1e-6,
    "max_iter": None,
    "levels": dict(LEVEL_MAP),
    "unknown_level": "zero",
}


def default_conf_path():
    return os.environ.get("SKILLRANK_CONF") or os.path.join(BASE, "skillrank_conf.json")


def validate_levels(levels):
    if not isinstance(levels, dict) or not levels:
        raise ConfigError("levels must be a non-empty mapping of level -> weight")
    out = {}
    for name, w in levels.items():
        try:
            w = float(w)
        except (TypeError, ValueError):
            raise ConfigError(f"weight for level '{name}' is not a number: {w!r}")
        if not math.isfinite(w) or w < 0:
            raise ConfigError(f"weight for level '{name}' must be finite and >= 0, got {w}")
        out[str(name)] = w
    return out


def _validate(conf):
    try:
        alpha = float(conf["alpha"])
        epsilon = float(conf["epsilon"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"alpha/epsilon must be numbers: {e}")
    if not 0.0 <= alpha <= 1.0:
        raise ConfigError(f"alpha must be in [0, 1], got {alpha}")
    if not epsilon > 0.0 or not math.isfinite(epsilon):
        raise ConfigError(f"epsilon must be a positive number, got {epsilon}")
    max_iter = conf["max_iter"]
    if max_iter is not None and (isinstance(max_iter, bool) or not isinstance(max_iter, int) or max_iter < 1):
        raise ConfigError(f"max_iter must be a positive integer or null, got {max_iter!r}")
    if conf["unknown_level"] not in UNKNOWN_LEVEL_POLICIES:
        raise ConfigError(f"unknown_level must be one of {UNKNOWN_LEVEL_POLICIES}, got {conf['unknown_level']!r}")
    conf["alpha"] = alpha
    conf["epsilon"] = epsilon
    conf["levels"] = validate_levels(conf["levels"])
    return conf


def load_config(path=None):
    """
    Return DEFAULT_CONF merged with the JSON file at `path` (or the default
    location). A missing file is not an error; a malformed one is.
    """
    conf = dict(DEFAULT_CONF)
    conf["levels"] = dict(LEVEL_MAP)
    path = path or default_conf_path()
    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                user_conf = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"cannot read config {path}: {e}")
        if not isinstance(user_conf, dict):
            raise ConfigError(f"config {path} must hold a JSON object")
        for key, value in user_conf.items():
            if key not in DEFAULT_CONF:
                logger.warning("ignoring unknown config key %r in %s", key, path)
                continue
            conf[key] = value
        logger.info("loaded skillrank config from %s", path)
    return _validate(conf)
