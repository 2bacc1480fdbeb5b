"""buildchecker - lock a branch when its builds keep failing."""

__version__ = "0.1.0"
