"""
Name normalization for generated Protobuf identifiers.

HTTP paths, enum labels, definition names and property names are free-form
strings in an OpenAPI document. The functions here turn them into identifiers
that protoc accepts, deterministically.
"""

import re
from typing import Optional, Set

from openapi2proto.common import proto_name, snake

ENUM_AMPERSAND = re.compile(r'\s*&\s*')
ENUM_DISALLOWED = re.compile(r'\s*[^A-Z0-9_\s]\s*|\s+')


def title(word: str) -> str:
    """Upper-case the first letter of a word and leave the rest untouched."""
    return word[0].upper() + word[1:] if word else word


def message_name(name: str) -> str:
    """
    Convert a definition name into a message name: every run of characters
    outside [A-Za-z0-9] separates words, each word gets a capital first letter.
    "pet" -> "Pet", "io.k8s.api.Pod" -> "IoK8sApiPod", "pet_owner" -> "PetOwner".
    """
    result = ''.join(title(token) for token in re.split(r'[^A-Za-z0-9]+', name) if token)
    if re.match(r'^[0-9]', result):
        result = '_' + result
    return result


def field_name(name: str) -> str:
    """Convert a property or parameter name into a field name."""
    return proto_name(str(name))


def package_name(title_text: str) -> str:
    """Derive a package name from the document title ("Cats API" -> "cats_api")."""
    pkg = re.sub(r'[^a-z0-9]+', '_', (title_text or '').lower()).strip('_')
    if not pkg:
        return 'api'
    if re.match(r'^[0-9]', pkg):
        pkg = 'api_' + pkg
    return pkg


def enum_context(name: str) -> str:
    """SCREAMING_SNAKE form of a type name, used to prefix enum values."""
    context = snake(name).upper()
    if re.match(r'^[0-9]', context):
        context = '_' + context
    return context


def path_method_to_name(path: str, method: str, operation_id: str = '') -> str:
    """
    Derive an RPC method name from an HTTP path and verb.

    The path is split on '/', placeholders contribute their parameter name and
    every segment is split into words on any non-alphanumeric character. All
    words are title-cased and concatenated behind the title-cased verb:
    ("/queue/{id}/enqueue_player", "get") -> "GetQueueIdEnqueuePlayer".

    An operationId, when the operation has one, names the method instead.
    """
    if operation_id:
        name = message_name(operation_id)
        if name:
            return name
    words = []
    for segment in path.split('/'):
        if segment.startswith('{') and segment.endswith('}'):
            segment = segment[1:-1]
        words.extend(title(token) for token in re.split(r'[^A-Za-z0-9]+', segment) if token)
    return message_name(method) + ''.join(words)


def to_enum(context: str, label: str, index: int) -> str:
    """
    Convert an enum label into a SCREAMING_SNAKE enum value name.

    '&' becomes _AND_, whitespace runs become '_' and each other character
    outside [A-Z0-9_] becomes one '_' (whitespace next to it included), so
    punctuation-dense labels turn into runs of underscores.

    Args:
        context: SCREAMING_SNAKE name of the enclosing enum.
        label: The enum label as written in the document.
        index: Position of the label, used when the label yields no usable name.
    """
    value = ENUM_AMPERSAND.sub('_AND_', str(label).upper())
    value = ENUM_DISALLOWED.sub('_', value)
    if not value:
        return f"{context}_{index}"
    if re.match(r'^[0-9]', value):
        value = f"{context}_{value}"
    return value


class EnumValueNamer:
    """
    Hands out unique value names within one enum.

    The zero-valued sentinel is reserved first; labels that normalize to a name
    already taken get the label's number appended until the name is free.

    Enum values live in the scope enclosing the enum, so `scope` holds the value
    names of sibling enums. A label clashing with one of them is prefixed with
    this enum's context ("ON" in enum B becomes "B_ON").
    """

    def __init__(self, enum_name: str, scope: Optional[Set[str]] = None) -> None:
        self.context = enum_context(enum_name)
        self.sentinel = f"{self.context}_UNSPECIFIED"
        self.scope: Set[str] = set(scope or ())
        self.used: Set[str] = {self.sentinel}

    def name(self, label: str, index: int) -> str:
        value = to_enum(self.context, label, index)
        if value not in self.used and value in self.scope:
            value = f"{self.context}_{value}"
        while value in self.used or value in self.scope:
            value = f"{value}_{index}"
        self.used.add(value)
        return value
