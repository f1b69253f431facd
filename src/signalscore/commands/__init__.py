"""Command implementations for the signalscore CLI."""
