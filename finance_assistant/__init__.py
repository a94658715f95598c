"""Personal finance API with a Gemini-backed assistant."""

__version__ = "1.0.0"
