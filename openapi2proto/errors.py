"""
Exceptions raised by the OpenAPI to Protobuf translation.

Every failure is reported to the caller as one of these exceptions; none of the
translation code terminates the process.
"""

from typing import Optional


class OpenApiToProtoError(Exception):
    """
    Exception raised when OpenAPI to Protobuf translation fails.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred
        cause: Optional underlying exception that caused this error
    """

    def __init__(self, message: str, context: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        self.message = message
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


class DecodeError(OpenApiToProtoError):
    """
    Exception raised when a document cannot be read or decoded into an API definition.

    Attributes:
        uri: The location of the offending document
    """

    def __init__(self, message: str, uri: str = '', cause: Optional[Exception] = None) -> None:
        self.uri = uri
        super().__init__(message, uri or None, cause)


class UnresolvableReferenceError(OpenApiToProtoError):
    """
    Exception raised when a $ref cannot be mapped to a type.

    Attributes:
        ref: The reference string as written in the document
    """

    def __init__(self, ref: str, reason: str, context: Optional[str] = None) -> None:
        self.ref = ref
        super().__init__(f"Unresolvable reference '{ref}': {reason}", context)


class NameCollisionError(OpenApiToProtoError):
    """
    Exception raised when two generated declarations end up with the same identifier.

    Attributes:
        name: The colliding identifier
        scope: The enclosing declaration (message, service or file)
    """

    def __init__(self, name: str, scope: str, context: Optional[str] = None) -> None:
        self.name = name
        self.scope = scope
        super().__init__(f"Name collision: '{name}' is generated twice in {scope}", context)
