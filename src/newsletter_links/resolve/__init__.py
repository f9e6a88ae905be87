"""Resolve links that hide behind redirects and landing pages."""
