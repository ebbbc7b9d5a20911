"""Core primitives: errors, accumulating results, caching, logging, settings, rejects."""
