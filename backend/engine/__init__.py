"""
Rendering engine adapter.

The map instance is a black box to the rest of the backend: it is constructed
synchronously, loads its base style in the background, fires `style.load`
once, and then accepts sources and layers. `StyleMap` implements that
contract in-process by composing a Mapbox GL style document.
"""
