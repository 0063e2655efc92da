"""User-facing entry points: HTTP trigger and command line."""
