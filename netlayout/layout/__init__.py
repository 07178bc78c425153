"""Layout engine: subnet topology, container sizing, node placement and diversion overlays.

Run it through :func:`netlayout.layout.synthesizer.synthesize`.
"""
