"""weightdrift -- benchmark weight drift detection and reconciliation."""

__version__ = "0.1.0"
