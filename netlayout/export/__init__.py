"""Exporters converting a diagram to canvas-specific JSON."""
