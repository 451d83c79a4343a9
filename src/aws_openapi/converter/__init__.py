"""AWS service description to OpenAPI 3 conversion.

The pipeline runs per document: shapes are transformed into schemas,
operations into routes with parameters and bodies, and a final pass
tidies the assembled document.
"""

from aws_openapi.converter.engine import convert, convert_document
from aws_openapi.converter.options import ConversionOptions, service_name_from_filename
from aws_openapi.converter.routes import ConversionError, RouteConflictError
from aws_openapi.model.validation import UnsupportedDocumentError

__all__ = [
    "ConversionError",
    "ConversionOptions",
    "RouteConflictError",
    "UnsupportedDocumentError",
    "convert",
    "convert_document",
    "service_name_from_filename",
]
