"""Command-line entry point (`todo`), command registry and plain-text rendering."""
