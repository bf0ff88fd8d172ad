"""Comparison kernel: models, normalization, matching, diffing, severity, summary."""
