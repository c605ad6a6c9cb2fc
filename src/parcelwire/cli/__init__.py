"""Command-line interface for parcelwire."""
