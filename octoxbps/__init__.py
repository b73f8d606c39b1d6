"""Package data, output parsing, version comparison, repository, list model and selection for an XBPS front-end."""

__version__ = "0.1.0"
__all__ = ["package", "vercmp", "listparse", "repository", "model", "selection"]