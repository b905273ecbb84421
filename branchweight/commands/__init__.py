"""Command implementations for the branchweight CLI."""
