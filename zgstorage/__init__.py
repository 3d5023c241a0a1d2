"""Client library for a sharded, merkle-verified storage network and its key-value layer."""

__version__ = "0.1.0"