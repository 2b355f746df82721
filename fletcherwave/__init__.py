"""Three-dimensional ISO/VTI/TTI pseudo-acoustic wave modelling with RSF output."""

__version__ = "0.1.0"