"""Link models, classification, tracking cleanup and dedup."""
