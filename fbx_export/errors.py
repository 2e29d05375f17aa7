"""
Exception types raised while patching an FBX template.

Each error carries the DiagnosticKind it is reported under once it reaches
the export boundary.
"""

from .diagnostics import DiagnosticKind


class FbxExportError(RuntimeError):
    """Base class for all export failures."""
    kind = DiagnosticKind.WRITE_FAILED


class MissingInputError(FbxExportError):
    """Mesh data or template document is absent or empty."""
    kind = DiagnosticKind.MISSING_INPUT


class MalformedTemplateError(FbxExportError):
    """A structurally required node is missing from the template."""
    kind = DiagnosticKind.MALFORMED_TEMPLATE


class TypeMismatchError(FbxExportError):
    """A replacement value's type disagrees with the existing slot."""
    kind = DiagnosticKind.TYPE_MISMATCH


class ConversionInputError(FbxExportError):
    """An array handed to the converter is absent."""
    kind = DiagnosticKind.CONVERSION_INPUT_INVALID


class FbxFormatError(FbxExportError):
    """Binary FBX data could not be read or written."""
    kind = DiagnosticKind.MALFORMED_TEMPLATE
