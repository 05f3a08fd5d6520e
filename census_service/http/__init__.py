"""HTTP-level helpers: error payloads and request ids."""
