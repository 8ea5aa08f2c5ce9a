"""Console command surface and composition root."""
