"""tdlr CLI commands."""
