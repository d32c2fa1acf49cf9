"""
Exceptions raised by the graph store and the rank engine.
All of them derive from SkillRankError so callers can catch one type.
"""


class SkillRankError(Exception):
    pass


class EmptyGraphError(SkillRankError, ValueError):
    """Ranking was requested on a graph with no nodes."""


class InvalidParameterError(SkillRankError, ValueError):
    """alpha, epsilon or max_iter outside the accepted range."""


class ConvergenceError(SkillRankError, RuntimeError):
    def __init__(self, iterations, delta):
        self.iterations = iterations
        self.delta = delta
        super().__init__(f"rank did not converge after {iterations} iterations (delta={delta:.3e})")


class UnknownLevelError(SkillRankError, KeyError):
    def __init__(self, level, known):
        self.level = level
        self.known = sorted(known)
        super().__init__(f"Unknown level '{level}'. Allowed: {self.known}")

    def __str__(self):
        return self.args[0]


class ConfigError(SkillRankError, ValueError):
    pass
