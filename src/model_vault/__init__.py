"""Model Vault: 3D model file store with streaming coordinate transforms."""

__version__ = "0.1.0"
