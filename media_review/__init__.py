"""Media review web form backed by Gemini on Vertex AI."""

__version__ = "0.1.0"
