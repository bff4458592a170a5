"""DS9 region import/export.

Translates line-oriented DS9 region files into pixel-space region records
anchored to an image, and renders region records back into DS9 syntax in
either pixel or world coordinates.
"""

__version__ = "0.1.0"
