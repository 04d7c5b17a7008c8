"""Command implementations for the visapprove CLI."""
