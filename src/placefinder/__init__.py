"""PlaceFinder - paginated listing and nearest-place recommendations."""

__version__ = "0.1.0"
