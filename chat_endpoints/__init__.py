"""Chat endpoints: adapt upstream text-generation APIs to one token-stream interface."""

__version__ = "0.1.0"
