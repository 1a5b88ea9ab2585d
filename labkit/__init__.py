"""Product API with JWT login, currency quote service, event dispatching and tax rules."""

__version__ = "0.1.0"