"""Enrichment and prepare flows."""
