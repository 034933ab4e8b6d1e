"""HTTP API for the model-vault file service."""
