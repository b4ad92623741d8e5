"""Exception hierarchy for analyticdefs.

The normalize/denormalize core never raises on malformed documents; it logs
and degrades. These exceptions cover the edges around it: building schemas,
reading XML text, loading configuration and picking a document kind.
"""


class AnalyticsError(Exception):
    """Base exception for analyticdefs errors."""
    pass


class SchemaError(AnalyticsError):
    """Raised when a schema graph cannot be built."""
    pass


class DanglingTypeReferenceError(SchemaError):
    """Raised when a field or list refers to a type that was never declared."""
    def __init__(self, owner: str, ref: str):
        self.owner = owner
        self.ref = ref
        super().__init__(f"Type '{owner}' refers to undeclared type '{ref}'")


class UnsupportedDocumentKindError(AnalyticsError):
    """Raised when a type name is not one of the supported document kinds."""
    def __init__(self, kind: str, supported: list[str]):
        self.kind = kind
        self.supported = supported
        super().__init__(
            f"Unsupported document kind '{kind}'. Supported kinds: {', '.join(sorted(supported))}"
        )


class DefinitionParseError(AnalyticsError):
    """Raised when a definition is not well-formed XML."""
    pass


class ConfigError(AnalyticsError):
    """Raised when a transform configuration cannot be loaded."""
    pass
