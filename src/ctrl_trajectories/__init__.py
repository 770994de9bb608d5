"""Generators and trajectory ensembles for quantum optimal control."""

__version__ = "0.1.0"
