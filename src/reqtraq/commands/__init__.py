"""reqtraq.commands - Command implementations for the CLI."""
