"""Convert AWS SDK service descriptions into OpenAPI 3 documents."""

__version__ = "0.1.0"
