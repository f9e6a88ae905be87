"""Resolve, classify and dedupe links from e-mail newsletters."""
