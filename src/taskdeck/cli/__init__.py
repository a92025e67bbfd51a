"""Console front-end: composition root, slash commands, REPL loop, entry point."""
