"""El Palo de Queso branching-narrative engine."""

__version__ = "0.3.0"
