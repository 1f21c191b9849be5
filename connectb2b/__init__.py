"""Connect B2B — directory search, connection requests and gated company disclosure."""
