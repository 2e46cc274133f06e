"""HTTP API for remotesync."""
