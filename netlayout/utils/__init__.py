"""Small helpers shared across netlayout that do not depend on the layout engine."""
