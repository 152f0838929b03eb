""" Per-invocation state shared by the schema and service translators """

import logging
from typing import Dict, List, Optional, Set

from openapi2proto.errors import NameCollisionError, UnresolvableReferenceError
from openapi2proto.protomodel import Enum, Message, ProtoFile, enum_value_names, new_proto_file
from openapi2proto.refresolver import RefKind, ResolvedType, classify_ref, fragment_name, resolve_ref_type
from openapi2proto.swagger import APIDefinition, Parameter, Response, SchemaItem

logger = logging.getLogger(__name__)

ANY_TYPE = 'google.protobuf.Any'
ANY_IMPORT = 'google/protobuf/any.proto'
EMPTY_TYPE = 'google.protobuf.Empty'
EMPTY_IMPORT = 'google/protobuf/empty.proto'
HTTP_IMPORT = 'google/api/annotations.proto'


class TranslationContext:
    """
    Everything one translation unit accumulates: the ProtoFile being built,
    the imports it needs and the external references it found.

    A context is created for every generate call and discarded afterwards, so
    nothing leaks from one document to the next.
    """

    def __init__(self, api: APIDefinition, package: str, emit_options: bool = False, base_uri: str = '') -> None:
        self.api = api
        self.definitions = api.definitions
        self.emit_options = emit_options
        self.base_uri = base_uri
        self.proto_file: ProtoFile = new_proto_file(package)
        self.external_refs: Dict[str, List[ResolvedType]] = {}

    def resolve(self, ref: str) -> ResolvedType:
        """Resolve a schema reference and record the import it implies."""
        resolved = resolve_ref_type(ref, self.definitions, self.base_uri)
        if resolved.is_external:
            if resolved.owning_file not in self.external_refs:
                logger.debug("Package %s imports %s", self.proto_file.package, resolved.owning_file)
            targets = self.external_refs.setdefault(resolved.owning_file, [])
            if not any((t.document, t.fragment) == (resolved.document, resolved.fragment) for t in targets):
                targets.append(resolved)
            self.proto_file.imports.add(resolved.owning_file)
        elif resolved.fragment.startswith('/definitions/') and fragment_name(resolved.fragment) not in self.definitions:
            raise UnresolvableReferenceError(ref, "no such definition in this document")
        return resolved

    def local_definition(self, ref: str) -> Optional[SchemaItem]:
        """The definition a '#/definitions/<name>' reference points to, None for any other reference."""
        parsed = classify_ref(ref, self.base_uri)
        if parsed.kind != RefKind.FRAGMENT or not parsed.fragment.startswith('/definitions/'):
            return None
        return self.definitions.get(fragment_name(parsed.fragment))

    def parameter(self, ref: str) -> Parameter:
        parsed = classify_ref(ref, self.base_uri)
        name = fragment_name(parsed.fragment)
        if parsed.kind != RefKind.FRAGMENT or not parsed.fragment.startswith('/parameters/') or name not in self.api.parameters:
            raise UnresolvableReferenceError(ref, "no such parameter in this document")
        return self.api.parameters[name]

    def response(self, ref: str) -> Response:
        parsed = classify_ref(ref, self.base_uri)
        name = fragment_name(parsed.fragment)
        if parsed.kind != RefKind.FRAGMENT or not parsed.fragment.startswith('/responses/') or name not in self.api.responses:
            raise UnresolvableReferenceError(ref, "no such response in this document")
        return self.api.responses[name]

    def any_type(self) -> str:
        self.proto_file.imports.add(ANY_IMPORT)
        return ANY_TYPE

    def enum_value_names(self) -> Set[str]:
        """Value names of the top-level enums declared so far."""
        return enum_value_names(self.proto_file.enums)

    def empty_type(self) -> str:
        self.proto_file.imports.add(EMPTY_IMPORT)
        return EMPTY_TYPE

    def check_free(self, name: str, context: Optional[str] = None) -> None:
        if name in self.proto_file.messages or name in self.proto_file.enums:
            raise NameCollisionError(name, f"package '{self.proto_file.package}'", context)

    def add_message(self, message: Message, context: Optional[str] = None) -> None:
        self.check_free(message.name, context)
        self.proto_file.messages[message.name] = message

    def add_enum(self, enum: Enum, context: Optional[str] = None) -> None:
        self.check_free(enum.name, context)
        self.proto_file.enums[enum.name] = enum
