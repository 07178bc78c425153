"""Loading of YAML network declarations.

Use :func:`netlayout.dsl.loader.load_document` to obtain the typed declaration
and its structural overrides from a YAML string.
"""
