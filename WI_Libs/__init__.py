"""
WI_Libs - Watimage Library Modules

This package contains core functionality for the Watimage project,
organized into specialized sub-packages:

- ImageEditingLib: Color/geometry normalization, filters and image models
- WatermarkLib: Watermark placement and compositing
- SessionLib: Chainable image sessions and output encoding
"""

__version__ = "0.1.0"
