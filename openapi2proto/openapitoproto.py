"""
OpenAPI 2.0 (Swagger) to Protobuf converter.

OpenApiToProto turns one decoded Swagger document into one proto3 file:
definitions become messages and enums, paths become the RPCs of one service.
convert_openapi_to_proto additionally loads every document the root document
references and writes a .proto file for each of them.
"""

# pylint: disable=line-too-long

import logging
import os
import posixpath
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Set, Tuple, Union
from urllib.parse import unquote, urljoin

import jsonpointer
from jsonpointer import JsonPointerException

from openapi2proto.context import TranslationContext
from openapi2proto.errors import NameCollisionError, UnresolvableReferenceError
from openapi2proto.loader import DocumentLoader
from openapi2proto.naming import message_name, package_name
from openapi2proto.protomodel import Enum, ProtoFile, render_proto_file
from openapi2proto.refresolver import ResolvedType, is_url
from openapi2proto.schematranslator import SchemaTranslator
from openapi2proto.servicetranslator import ServiceTranslator
from openapi2proto.swagger import APIDefinition, SchemaItem

logger = logging.getLogger(__name__)


class OpenApiToProto:
    """
    Converts Swagger documents to proto3.

    Attributes:
        emit_options: Annotate RPCs with google.api.http and x-options, fields with x-options.
        package_name: Package of the generated file; derived from info.title when empty.
    """

    def __init__(self) -> None:
        self.emit_options: bool = False
        self.package_name: str = ''

    def build_context(self, api: Union[APIDefinition, Dict[str, Any]], base_uri: str = '',
                      package: Optional[str] = None, include_services: bool = True) -> TranslationContext:
        """
        Translate a document into a ProtoFile held by a fresh TranslationContext.

        Args:
            api: The document, as model or as decoded dict.
            base_uri: Directory of the document relative to the root document.
            package: Package override for this document.
            include_services: Translate paths into a service.
        """
        if not isinstance(api, APIDefinition):
            api = APIDefinition.from_dict(api)
        if package is None:
            package = self.package_name or package_name(api.info.title)
        context = TranslationContext(api, package, self.emit_options, base_uri)
        proto = context.proto_file

        global_options = api.extensions.get('x-global-options')
        if isinstance(global_options, dict):
            proto.options.update({str(k): v for k, v in global_options.items()})

        schemas = SchemaTranslator(context)
        for name in sorted(api.definitions):
            declaration = schemas.translate(name, api.definitions[name])
            if isinstance(declaration, Enum):
                context.add_enum(declaration, f"definitions/{name}")
            else:
                context.add_message(declaration, f"definitions/{name}")

        if include_services and api.paths:
            service = ServiceTranslator(context, schemas).translate(f"{message_name(package) or 'Api'}Service")
            if service.functions:
                proto.services[service.name] = service
        return context

    def build_proto_file(self, api: Union[APIDefinition, Dict[str, Any]]) -> ProtoFile:
        return self.build_context(api).proto_file

    def generate_proto(self, api: Union[APIDefinition, Dict[str, Any]]) -> bytes:
        """Generate the proto3 source of a document."""
        return render_proto_file(self.build_proto_file(api)).encode('utf-8')


def generate_proto(api: Union[APIDefinition, Dict[str, Any]], options: bool = False, package: Optional[str] = None) -> bytes:
    """
    Generate proto3 source for an already decoded Swagger document.

    Args:
        api: The document, as model or as decoded dict.
        options: Emit google.api.http and x-options annotations.
        package: Package name; derived from info.title when not given.

    Returns:
        bytes: The UTF-8 encoded .proto text.
    """
    openapitoproto = OpenApiToProto()
    openapitoproto.emit_options = options
    openapitoproto.package_name = package or ''
    return openapitoproto.generate_proto(api)


def join_location(root_location: str, document: str) -> str:
    """Location of a referenced document, relative references taken from the root document's directory."""
    if is_url(document):
        return document
    if is_url(root_location):
        return urljoin(root_location, document)
    return os.path.normpath(os.path.join(os.path.dirname(root_location), document))


def referenced_api(document: Dict[str, Any], targets: List[ResolvedType], location: str) -> APIDefinition:
    """
    The API definition of a referenced document, with every referenced schema
    declared. A reference without a fragment names the whole document, after
    the file; a fragment pointing outside the definitions names the schema it
    points to.

    Raises:
        UnresolvableReferenceError: when a fragment points to nothing.
        NameCollisionError: when two fragments yield the same type name.
    """
    api = APIDefinition.from_dict(document, location)
    added: Dict[str, SchemaItem] = {}
    pointers: Dict[str, str] = {}
    for resolved in targets:
        pointer = unquote(resolved.fragment)
        if not pointer.strip('/'):
            pointer = ''
            schema = SchemaItem.from_dict({k: v for k, v in document.items() if k != 'definitions'}, location)
        else:
            try:
                target = jsonpointer.resolve_pointer(document, pointer)
            except JsonPointerException as e:
                raise UnresolvableReferenceError(resolved.ref, f"{pointer} does not exist", location) from e
            if pointer.startswith('/definitions/'):
                continue
            schema = SchemaItem.from_dict(target, f"{location}#{pointer}")
        if pointers.setdefault(resolved.type_name, pointer) != pointer:
            raise NameCollisionError(resolved.type_name, f"file '{resolved.owning_file}'", location)
        added[resolved.type_name] = schema
    api.definitions = {**added, **{k: v for k, v in api.definitions.items() if k not in added}}
    return api


def write_proto_file(proto: ProtoFile, proto_file_path: str) -> None:
    """Save a ProtoFile, creating the directory if needed."""
    proto_dir = os.path.dirname(proto_file_path)
    if proto_dir and not os.path.exists(proto_dir):
        os.makedirs(proto_dir, exist_ok=True)
    with open(proto_file_path, 'w', encoding='utf-8') as proto_file:
        proto_file.write(render_proto_file(proto))
    logger.info("Wrote %s", proto_file_path)


def convert_referenced_documents(openapitoproto: OpenApiToProto, loader: DocumentLoader, root_location: str,
                                 external_refs: Dict[str, List[ResolvedType]], proto_dir: str) -> Set[str]:
    """
    Write a .proto file for every document reachable through external references.

    A file is written again when a document converted after it references
    further schemas in it, so every referenced type ends up declared.

    Raises:
        NameCollisionError: when two different documents map to the same owning file.

    Returns:
        The owning files written, relative to proto_dir.
    """
    targets: Dict[str, List[ResolvedType]] = {}
    locations: Dict[str, str] = {}
    seen: Set[Tuple[str, str]] = set()
    queue: Deque[str] = deque()

    def collect(refs: Dict[str, List[ResolvedType]]) -> None:
        for owning_file in sorted(refs):
            for resolved in refs[owning_file]:
                location = join_location(root_location, resolved.document)
                first = locations.setdefault(owning_file, location)
                if first != location:
                    raise NameCollisionError(owning_file, f"output directory '{proto_dir}'", f"{first} and {location}")
                key = (location, unquote(resolved.fragment).strip('/'))
                if key in seen:
                    continue
                seen.add(key)
                targets.setdefault(owning_file, []).append(resolved)
                if owning_file not in queue:
                    queue.append(owning_file)

    collect(external_refs)
    while queue:
        owning_file = queue.popleft()
        location = locations[owning_file]
        first = targets[owning_file][0]
        api = referenced_api(loader.load_document(location), targets[owning_file], location)
        context = openapitoproto.build_context(api, posixpath.dirname(first.document), first.package, include_services=False)
        write_proto_file(context.proto_file, os.path.join(proto_dir, *owning_file.split('/')))
        collect(context.external_refs)
    return set(targets)


def convert_openapi_to_proto(openapi_path: str, proto_path: Optional[str] = None, emit_options: bool = False,
                             package: Optional[str] = None, follow_refs: bool = True,
                             loader: Optional[DocumentLoader] = None) -> str:
    """
    Convert an OpenAPI 2.0 document file to a .proto file.

    Args:
        openapi_path: Path or URL of the Swagger document (JSON or YAML).
        proto_path: Output .proto file. Referenced documents are written next to
            it, at their owning file paths. When None nothing is written.
        emit_options: Emit google.api.http and x-options annotations.
        package: Package name; derived from info.title when not given.
        follow_refs: Also convert the documents referenced by the root document.
        loader: Document loader to use, a fresh one by default.

    Returns:
        str: The proto3 text of the root document.
    """
    loader = loader or DocumentLoader()
    openapitoproto = OpenApiToProto()
    openapitoproto.emit_options = emit_options
    openapitoproto.package_name = package or ''

    api = APIDefinition.from_dict(loader.load_document(openapi_path), openapi_path)
    context = openapitoproto.build_context(api)
    proto_text = render_proto_file(context.proto_file)
    if proto_path is None:
        if context.external_refs:
            logger.warning("Not converting referenced documents: %s", ', '.join(sorted(context.external_refs)))
        return proto_text

    write_proto_file(context.proto_file, proto_path)
    if not context.external_refs:
        return proto_text
    if follow_refs:
        convert_referenced_documents(openapitoproto, loader, openapi_path, context.external_refs,
                                     os.path.dirname(proto_path))
    else:
        logger.warning("Not converting referenced documents: %s", ', '.join(sorted(context.external_refs)))
    return proto_text
