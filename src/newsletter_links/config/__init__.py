"""Process settings, the YAML app config and newsletter input files."""
