"""Convert stereo photos to spatial HEIC photos."""

__version__ = "0.1.0"
