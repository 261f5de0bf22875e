"""Incident globe: filtering, hover aggregation, heatmap binning and chapter state."""
