"""HTTP surface for the interview evaluation pipeline."""
