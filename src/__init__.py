"""Schema-driven query engine for heterogeneous record collections."""

__version__ = "0.1.0"
