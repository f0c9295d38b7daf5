"""semverstore: a semantic version kept in a shared, contended store."""

__version__ = "0.1.0"
