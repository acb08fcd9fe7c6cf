"""Kubeconfig store configuration and validation, search indexes, hook state, path resolution and landscape export helpers."""

__version__ = "0.1.0"