"""saltrace - race worker processes across a keyspace to find a CREATE2 salt."""

__version__ = "0.1.0"
