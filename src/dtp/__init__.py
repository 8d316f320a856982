"""DocTransplant: formatting-preserving translation transplant for Office documents."""

__version__ = "0.1.0"
