"""Client de bureau CycleChat."""

__version__ = "0.1.0"
