"""Command-line interface for canvas-grid."""
