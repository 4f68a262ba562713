"""context-pack - task-ranked, token-budgeted context bundles for a codebase."""

__version__ = "0.1.0"
