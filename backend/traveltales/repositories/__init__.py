# Repositories package init
"""Persistence layer: SQL lives here and nowhere else."""
