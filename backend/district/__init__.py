"""
District configuration: view, base style, feature sources and the layer stack.

Loaded from `config/district.yaml` and tweaked through `DISTRICT_MAP_*` env vars.
"""
