"""
Browser-driven bulk harvester for the Pokédex card generator.

This module provides a worker pool that drives one real browser session per
worker, downloads one card image per (entity, mode) pair, and records
completion on the filesystem so re-runs only fetch what is missing.
"""
