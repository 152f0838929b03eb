"""
Resolution of $ref strings to Protobuf type names and owning .proto files.

A reference is classified once into one of three shapes:

* FRAGMENT: '#/definitions/Name', a definition of the document being translated.
  It resolves to the bare type name and needs no import.
* URL: 'http://host/commons/name.json#/definitions/Name'. The URL path decides
  package and file: package 'commons.name', type 'Name', file 'commons/name.proto'.
* PATH: 'commons/names/Name.json', relative to the referencing document. '..'
  segments are reduced against the referencing document's directory.

The directory segments of the document path form the package. When the
reference carries a fragment the document's base file name is appended as one
more package segment and the fragment's last segment is the type name; without
a fragment the capitalised base file name is the type name.
"""

import logging
import posixpath
import re
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional
from urllib.parse import unquote, urljoin, urlparse

from openapi2proto.errors import UnresolvableReferenceError
from openapi2proto.naming import message_name, title

logger = logging.getLogger(__name__)


class RefKind(Enum):
    """Shape of a reference string."""
    FRAGMENT = 'fragment'
    URL = 'url'
    PATH = 'path'


class ParsedRef(NamedTuple):
    """A classified reference: its kind, the document location and the fragment."""
    kind: RefKind
    ref: str
    document: str
    fragment: str
    path: str


class ResolvedType(NamedTuple):
    """
    The outcome of resolving a reference.

    Attributes:
        qualified_name: Dot-separated package and type name used as field type.
        owning_file: The .proto file declaring the type, '' when the type is local.
        package: The Protobuf package of the owning file, '' when local.
        type_name: The unqualified type name.
        ref: The reference as written.
        document: The referenced document location, joined onto the base URI.
        fragment: The JSON pointer fragment without '#', possibly ''.
    """
    qualified_name: str
    owning_file: str
    package: str
    type_name: str
    ref: str
    document: str = ''
    fragment: str = ''

    @property
    def is_external(self) -> bool:
        return bool(self.owning_file)


def is_url(location: str) -> bool:
    """True for absolute URLs; single-letter schemes are Windows drive letters."""
    parsed = urlparse(location)
    return len(parsed.scheme) > 1


def fragment_name(fragment: str) -> str:
    """The last segment of a JSON pointer fragment, unescaped."""
    segment = fragment.rstrip('/').split('/')[-1]
    return unquote(segment).replace('~1', '/').replace('~0', '~')


def classify_ref(ref: str, base_uri: str = '') -> ParsedRef:
    """
    Classify a reference string.

    Args:
        ref: The $ref value.
        base_uri: Location of the referencing document's directory, relative to
            the root document, or an absolute URL. '' for the root document.

    Raises:
        UnresolvableReferenceError: when the reference has none of the known shapes.
    """
    if not ref or not ref.strip():
        raise UnresolvableReferenceError(ref, "empty reference")
    document, _, fragment = ref.partition('#')
    if not document:
        if not fragment.strip('/'):
            raise UnresolvableReferenceError(ref, "fragment is empty")
        return ParsedRef(RefKind.FRAGMENT, ref, '', fragment, '')

    if not is_url(document) and base_uri:
        if is_url(base_uri):
            document = urljoin(base_uri.rstrip('/') + '/', document)
        else:
            document = posixpath.join(base_uri, document)

    parsed = urlparse(document)
    if is_url(document):
        if not parsed.netloc:
            raise UnresolvableReferenceError(ref, f"scheme '{parsed.scheme}' has no host")
        return ParsedRef(RefKind.URL, ref, document, fragment, parsed.path)
    return ParsedRef(RefKind.PATH, ref, document, fragment, document.replace('\\', '/'))


def normalize_segments(path: str) -> List[str]:
    """Split a path and reduce '.' and '..' segments; '..' at the top is dropped."""
    segments: List[str] = []
    for segment in path.split('/'):
        if segment in ('', '.'):
            continue
        if segment == '..':
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    return segments


def package_segment(segment: str) -> str:
    val = re.sub(r'[^a-z0-9_]', '_', segment.lower())
    if re.match(r'^[0-9]', val):
        val = '_' + val
    return val


def qualify(parsed: ParsedRef) -> ResolvedType:
    """Compute package, type name and owning file of a URL or PATH reference."""
    segments = normalize_segments(parsed.path)
    if not segments:
        raise UnresolvableReferenceError(parsed.ref, "document has no file name")
    directories = [d.lower() for d in segments[:-1]]
    base = posixpath.splitext(segments[-1])[0]
    if not base:
        raise UnresolvableReferenceError(parsed.ref, "document has no file name")

    owning_file = '/'.join(directories + [base.lower() + '.proto'])
    package_parts = [package_segment(d) for d in directories]
    if parsed.fragment.strip('/'):
        package_parts.append(package_segment(base))
        type_name = message_name(fragment_name(parsed.fragment))
    else:
        type_name = message_name(title(base))
    if not type_name:
        raise UnresolvableReferenceError(parsed.ref, "no type name can be derived")

    package = '.'.join(package_parts)
    qualified_name = f"{package}.{type_name}" if package else type_name
    return ResolvedType(qualified_name, owning_file, package, type_name, parsed.ref,
                        parsed.document, parsed.fragment)


def resolve_ref_type(ref: str, definitions: Optional[Dict[str, Any]] = None, base_uri: str = '') -> ResolvedType:
    """
    Resolve a reference to its qualified type name and owning file.

    Args:
        ref: The $ref value.
        definitions: The definitions of the document being translated, if known.
        base_uri: Directory of the referencing document (see classify_ref).

    Returns:
        ResolvedType: owning_file is '' for references into the current document.
    """
    parsed = classify_ref(ref, base_uri)
    if parsed.kind == RefKind.FRAGMENT:
        name = fragment_name(parsed.fragment)
        type_name = message_name(name)
        if not type_name:
            raise UnresolvableReferenceError(ref, "no type name can be derived")
        if definitions is not None and name in definitions:
            logger.debug("Reference %s resolved to local definition %s", ref, type_name)
        else:
            logger.debug("Reference %s treated as local type %s", ref, type_name)
        return ResolvedType(type_name, '', '', type_name, ref, '', parsed.fragment)

    resolved = qualify(parsed)
    logger.debug("Reference %s resolved to %s in %s", ref, resolved.qualified_name, resolved.owning_file)
    return resolved
