"""Comment-store clients for prsync."""
