"""Fixed-point decimals, big integers, network helpers and math helpers."""

__version__ = "0.1.0"