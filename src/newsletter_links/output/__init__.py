"""LINKS.yaml output."""
