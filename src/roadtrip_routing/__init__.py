"""Route distance computation and GPX export for road trips."""

__version__ = "1.0.0"
