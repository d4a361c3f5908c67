"""clipnote: capture clipboard snippets into notebooks and chat with them."""

__version__ = "0.1.0"
