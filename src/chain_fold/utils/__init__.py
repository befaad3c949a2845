"""Statistics and report figures for folding runs."""
