"""Core pipeline components: executor, cache, resolution, extraction, reconciliation."""
