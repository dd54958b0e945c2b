"""versemark: editor intelligence for scripture reference headers."""

__version__ = "0.1.0"
