"""Game lookup and collection tooling for the IGDB game database."""

__version__ = "0.1.0"
