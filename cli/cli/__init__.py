"""featuregate command-line interface."""
