"""Domain types and the analysis pipeline."""
