"""Exception types raised by fragtree."""


class ConfigurationError(ValueError):
    """Invalid configuration or scorer composition, raised before any graph is built."""


class GraphInvariantError(RuntimeError):
    """A fragmentation graph (or a tree assembled from it) violates its structural invariants.

    This is a programming error: a correctly built graph never triggers it.
    """
