"""Infrastructure: logging and data source adapters."""
