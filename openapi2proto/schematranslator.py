# pylint: disable=line-too-long

""" SchemaTranslator class for converting Swagger schema definitions to Protobuf messages and enums """

import logging
from typing import Dict, NamedTuple, Optional, Set, Union

from openapi2proto.context import TranslationContext
from openapi2proto.errors import NameCollisionError, OpenApiToProtoError, UnresolvableReferenceError
from openapi2proto.naming import EnumValueNamer, field_name, message_name
from openapi2proto.protomodel import NO_COMMENT, Comment, Enum, Field, Message, enum_value_names, new_message
from openapi2proto.swagger import SchemaItem

logger = logging.getLogger(__name__)

FieldType = NamedTuple('FieldType', [('label', str), ('type', str), ('key_type', str), ('val_type', str)])

INTEGER_FORMATS = {'int32': 'int32', 'int64': 'int64', 'uint32': 'uint32', 'uint64': 'uint64'}
NUMBER_FORMATS = {'float': 'float', 'double': 'double'}
BYTES_FORMATS = ['byte', 'binary']


def scalar_type(schema: SchemaItem) -> str:
    """
    Map a Swagger primitive to the closest Protobuf scalar.

    Integer and number formats pick the width; without a recognised format the
    widest type is used (int64, double).
    """
    type_name = schema.type_name
    if type_name == 'boolean':
        return 'bool'
    if type_name == 'integer':
        return INTEGER_FORMATS.get(schema.format, 'int64')
    if type_name == 'number':
        return NUMBER_FORMATS.get(schema.format, 'double')
    if type_name == 'file':
        return 'bytes'
    if schema.format in BYTES_FORMATS:
        return 'bytes'
    return 'string'


def is_map(schema: SchemaItem) -> bool:
    """An object that only declares additionalProperties."""
    return schema.kind == 'object' and not schema.properties and not schema.all_of and \
        schema.additional_properties is not None and schema.additional_properties is not False


class SchemaTranslator:
    """
    Converts schema nodes into messages and enums.

    Inline objects and enums found in properties are declared as nested types of
    the message that owns the property; references become qualified type names
    and their owning files become imports of the translation unit.
    """

    def __init__(self, context: TranslationContext) -> None:
        self.context = context

    def translate(self, name: str, schema: SchemaItem) -> Union[Message, Enum]:
        """Convert a top-level definition."""
        type_name = message_name(name)
        if not type_name:
            raise OpenApiToProtoError(f"Definition name '{name}' yields no identifier", f"definitions/{name}")
        comment = Comment(schema.description, {})
        kind = schema.kind
        if kind == 'enum':
            return self.convert_enum(type_name, schema, comment, self.context.enum_value_names())

        message = new_message(type_name, comment)
        if kind == 'object':
            self.populate_object(message, schema)
        elif kind == 'array':
            self.add_field(message, 'items', schema, 1, use_comment=False)
        elif kind == 'untyped':
            logger.debug("Definition %s has no type, emitting an empty message", name)
        else:
            self.add_field(message, 'value', schema, 1, use_comment=False)
        return message

    def convert_enum(self, name: str, schema: SchemaItem, comment: Comment = NO_COMMENT, scope: Optional[Set[str]] = None) -> Enum:
        """
        Convert a string enum; the zero value is the UNSPECIFIED sentinel.
        `scope` holds the value names already declared next to the enum.
        """
        namer = EnumValueNamer(name, scope)
        fields: Dict[str, Field] = {namer.sentinel: Field(NO_COMMENT, '', '', '', '', namer.sentinel, 0, {})}
        for index, label in enumerate(schema.enum, 1):
            value = namer.name(label, index)
            fields[value] = Field(NO_COMMENT, '', '', '', '', value, index, {})
        return Enum(comment, name, fields)

    def collect_properties(self, schema: SchemaItem, owner: str, seen: Optional[Set[str]] = None) -> Dict[str, SchemaItem]:
        """The properties of an object schema, allOf parts merged in order."""
        seen = seen if seen is not None else set()
        properties: Dict[str, SchemaItem] = {}
        for part in schema.all_of:
            if part.ref:
                target = self.context.local_definition(part.ref)
                if target is None:
                    raise UnresolvableReferenceError(part.ref, "allOf can only merge definitions of the same document", owner)
                if part.ref in seen:
                    continue
                seen.add(part.ref)
                properties.update(self.collect_properties(target, owner, seen))
            else:
                properties.update(self.collect_properties(part, owner, seen))
        properties.update(schema.properties)
        return properties

    def populate_object(self, message: Message, schema: SchemaItem) -> None:
        properties = self.collect_properties(schema, message.name)
        if properties:
            for number, (name, property_schema) in enumerate(properties.items(), 1):
                self.add_field(message, name, property_schema, number)
        elif is_map(schema):
            self.add_field(message, 'additional_properties', schema, 1, use_comment=False)

    def add_field(self, message: Message, name: str, schema: SchemaItem, number: int, use_comment: bool = True) -> Field:
        """Append a field for a property; sibling fields must have distinct names."""
        proto_field_name = field_name(name)
        if any(f.name == proto_field_name for f in message.fields):
            raise NameCollisionError(proto_field_name, f"message '{message.name}'", f"property '{name}'")
        field_type = self.field_type(message, name, schema)
        options = {}
        if self.context.emit_options and isinstance(schema.extensions.get('x-options'), dict):
            options = dict(schema.extensions['x-options'])
        comment = Comment(schema.description, {}) if use_comment else NO_COMMENT
        field = Field(comment, field_type.label, field_type.type, field_type.key_type, field_type.val_type,
                      proto_field_name, number, options)
        message.fields.append(field)
        return field

    def add_nested(self, owner: Message, declaration: Union[Message, Enum]) -> None:
        if declaration.name in owner.messages or declaration.name in owner.enums:
            raise NameCollisionError(declaration.name, f"message '{owner.name}'")
        if isinstance(declaration, Enum):
            owner.enums[declaration.name] = declaration
        else:
            owner.messages[declaration.name] = declaration

    def wrap(self, owner: Message, name: str, schema: SchemaItem) -> str:
        """Declare a nested message holding a value proto cannot nest directly (list of lists, map of lists)."""
        wrapper = new_message(message_name(name))
        self.add_field(wrapper, 'items' if schema.kind == 'array' else 'value', schema, 1, use_comment=False)
        self.add_nested(owner, wrapper)
        return wrapper.name

    def field_type(self, owner: Message, name: str, schema: SchemaItem) -> FieldType:
        """
        Determine the type of a field named `name` in `owner`.

        Nested declarations needed by the type are registered in `owner`.
        """
        kind = schema.kind
        if kind == 'reference':
            return FieldType('', self.context.resolve(schema.ref).qualified_name, '', '')
        if kind == 'enum':
            enum = self.convert_enum(message_name(name), schema, scope=enum_value_names(owner.enums))
            self.add_nested(owner, enum)
            return FieldType('', enum.name, '', '')
        if kind == 'object':
            if is_map(schema):
                value = schema.additional_properties
                if not isinstance(value, SchemaItem) or value.kind == 'untyped':
                    return FieldType('', 'map', 'string', self.context.any_type())
                if value.kind == 'array' or is_map(value):
                    return FieldType('', 'map', 'string', self.wrap(owner, name, value))
                return FieldType('', 'map', 'string', self.field_type(owner, name, value).type)
            if not schema.properties and not schema.all_of:
                return FieldType('', self.context.any_type(), '', '')
            nested = new_message(message_name(name))
            self.populate_object(nested, schema)
            self.add_nested(owner, nested)
            return FieldType('', nested.name, '', '')
        if kind == 'array':
            items = schema.items
            if items is None or items.kind == 'untyped':
                return FieldType('repeated', self.context.any_type(), '', '')
            if items.kind == 'array' or is_map(items):
                return FieldType('repeated', self.wrap(owner, name, items), '', '')
            return FieldType('repeated', self.field_type(owner, name, items).type, '', '')
        if kind == 'untyped':
            logger.warning("Field %s of %s has no recognizable type, using google.protobuf.Any", name, owner.name)
            return FieldType('', self.context.any_type(), '', '')
        return FieldType('', scalar_type(schema), '', '')
