"""Data model: the declaration read from YAML and the diagram produced from it."""
