"""
vizcompose: composable visualization specifications

Builds declarative visualization specifications by combining small
fragments with algebraic operators instead of mutating objects:

    a * b    merge, b taking precedence
    a + b    layer, a drawn below b
    a | b    side by side
    a & b    one above the other

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Rendering engines
    - File formats or I/O
    - Themes and visual defaults
    - Schema validation

This package defines SPECIFICATION STRUCTURE and its algebra only.
Everything produced is an immutable value handed to external layers.
"""

__version__ = "0.1.0"
