import os
import sys

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

import unittest
from openapi2proto.context import TranslationContext
from openapi2proto.errors import NameCollisionError, UnresolvableReferenceError
from openapi2proto.protomodel import Enum, Message, render_enum, render_message
from openapi2proto.schematranslator import SchemaTranslator, is_map, scalar_type
from openapi2proto.swagger import APIDefinition, SchemaItem


def translator(definitions=None, emit_options=False):
    api = APIDefinition.from_dict({'swagger': '2.0', 'definitions': definitions or {}})
    context = TranslationContext(api, 'test', emit_options)
    return context, SchemaTranslator(context)


class TestScalarTypes(unittest.TestCase):
    def test_formats(self):
        cases = [
            ({'type': 'integer'}, 'int64'),
            ({'type': 'integer', 'format': 'int32'}, 'int32'),
            ({'type': 'integer', 'format': 'uint64'}, 'uint64'),
            ({'type': 'number'}, 'double'),
            ({'type': 'number', 'format': 'float'}, 'float'),
            ({'type': 'boolean'}, 'bool'),
            ({'type': 'string'}, 'string'),
            ({'type': 'string', 'format': 'date-time'}, 'string'),
            ({'type': 'string', 'format': 'byte'}, 'bytes'),
            ({'type': 'string', 'format': 'binary'}, 'bytes'),
            ({'type': 'file'}, 'bytes'),
            ({'type': ['null', 'integer'], 'format': 'int32'}, 'int32'),
        ]
        for node, expected in cases:
            self.assertEqual(scalar_type(SchemaItem.from_dict(node)), expected, node)

    def test_is_map(self):
        self.assertTrue(is_map(SchemaItem.from_dict({'type': 'object', 'additionalProperties': {'type': 'integer'}})))
        self.assertTrue(is_map(SchemaItem.from_dict({'additionalProperties': True})))
        self.assertFalse(is_map(SchemaItem.from_dict({'type': 'object', 'additionalProperties': False})))
        self.assertFalse(is_map(SchemaItem.from_dict({'type': 'object', 'properties': {'a': {'type': 'string'}},
                                                      'additionalProperties': {'type': 'string'}})))


class TestSchemaTranslator(unittest.TestCase):
    def test_top_level_enum(self):
        _, schemas = translator()
        enum = schemas.translate('pet_status', SchemaItem.from_dict({'type': 'string', 'enum': ['available', 'sold out', 'sold-out']}))
        self.assertIsInstance(enum, Enum)
        self.assertEqual(render_enum(enum),
                         "enum PetStatus {\n"
                         "  PET_STATUS_UNSPECIFIED = 0;\n"
                         "  AVAILABLE = 1;\n"
                         "  SOLD_OUT = 2;\n"
                         "  SOLD_OUT_3 = 3;\n"
                         "}\n")

    def test_non_string_enum_labels(self):
        _, schemas = translator()
        enum = schemas.translate('Flag', SchemaItem.from_dict({'enum': [True, None, 7]}))
        self.assertEqual(list(enum.fields), ['FLAG_UNSPECIFIED', 'TRUE', 'NULL', 'FLAG_7'])

    def test_fields_numbered_in_document_order(self):
        _, schemas = translator()
        message = schemas.translate('Pet', SchemaItem.from_dict({
            'type': 'object',
            'properties': {'zeta': {'type': 'string'}, 'alpha': {'type': 'integer', 'format': 'int32'}, 'mid': {'type': 'boolean'}},
        }))
        self.assertEqual([(f.name, f.number) for f in message.fields], [('zeta', 1), ('alpha', 2), ('mid', 3)])

    def test_nested_declarations(self):
        _, schemas = translator()
        message = schemas.translate('Order', SchemaItem.from_dict({
            'type': 'object',
            'properties': {
                'status': {'type': 'string', 'enum': ['open', 'closed']},
                'shipping': {'type': 'object', 'properties': {'city': {'type': 'string', 'description': 'City name.'}}},
                'matrix': {'type': 'array', 'items': {'type': 'array', 'items': {'type': 'number'}}},
                'counts': {'type': 'object', 'additionalProperties': {'type': 'integer', 'format': 'int32'}},
            },
        }))
        self.assertEqual(render_message(message),
                         "message Order {\n"
                         "  message Shipping {\n"
                         "    // City name.\n"
                         "    string city = 1;\n"
                         "  }\n"
                         "  message Matrix {\n"
                         "    repeated double items = 1;\n"
                         "  }\n"
                         "  enum Status {\n"
                         "    STATUS_UNSPECIFIED = 0;\n"
                         "    OPEN = 1;\n"
                         "    CLOSED = 2;\n"
                         "  }\n"
                         "  Status status = 1;\n"
                         "  Shipping shipping = 2;\n"
                         "  repeated Matrix matrix = 3;\n"
                         "  map<string, int32> counts = 4;\n"
                         "}\n")

    def test_nested_enums_share_value_scope(self):
        _, schemas = translator()
        message = schemas.translate('Switch', SchemaItem.from_dict({
            'type': 'object',
            'properties': {'x': {'type': 'string', 'enum': ['on', 'off']}, 'y': {'type': 'string', 'enum': ['on']}},
        }))
        self.assertEqual(list(message.enums['X'].fields), ['X_UNSPECIFIED', 'ON', 'OFF'])
        self.assertEqual(list(message.enums['Y'].fields), ['Y_UNSPECIFIED', 'Y_ON'])

    def test_array_and_scalar_definitions(self):
        context, schemas = translator({'Pet': {'type': 'object'}})
        pets = schemas.translate('Pets', SchemaItem.from_dict({'type': 'array', 'items': {'$ref': '#/definitions/Pet'}}))
        self.assertEqual(render_message(pets), "message Pets {\n  repeated Pet items = 1;\n}\n")
        token = schemas.translate('Token', SchemaItem.from_dict({'type': 'string'}))
        self.assertEqual(render_message(token), "message Token {\n  string value = 1;\n}\n")
        self.assertEqual(context.proto_file.imports, set())

    def test_untyped_definition_is_empty_message(self):
        _, schemas = translator()
        message = schemas.translate('Blob', SchemaItem.from_dict({}))
        self.assertIsInstance(message, Message)
        self.assertEqual(render_message(message), "message Blob {}\n")

    def test_untyped_property_uses_any(self):
        context, schemas = translator()
        message = schemas.translate('Box', SchemaItem.from_dict({'properties': {'content': {}}}))
        self.assertEqual(message.fields[0].type, 'google.protobuf.Any')
        self.assertIn('google/protobuf/any.proto', context.proto_file.imports)

    def test_all_of_merges_local_definitions(self):
        definitions = {
            'Base': {'type': 'object', 'properties': {'id': {'type': 'string'}}},
            'Named': {'allOf': [{'$ref': '#/definitions/Base'}], 'properties': {'name': {'type': 'string'}}},
        }
        context, schemas = translator(definitions)
        message = schemas.translate('Dog', SchemaItem.from_dict({
            'allOf': [{'$ref': '#/definitions/Named'}, {'properties': {'barks': {'type': 'boolean'}}}],
        }))
        self.assertEqual([f.name for f in message.fields], ['id', 'name', 'barks'])
        self.assertEqual(context.proto_file.imports, set())

    def test_all_of_external_reference(self):
        _, schemas = translator()
        with self.assertRaises(UnresolvableReferenceError):
            schemas.translate('Dog', SchemaItem.from_dict({'allOf': [{'$ref': 'other.json#/definitions/Base'}]}))

    def test_external_reference_adds_import(self):
        context, schemas = translator()
        message = schemas.translate('Dog', SchemaItem.from_dict({
            'properties': {'owner': {'$ref': 'people/Person.json#/definitions/Person'}},
        }))
        self.assertEqual(message.fields[0].type, 'people.person.Person')
        self.assertEqual(context.proto_file.imports, {'people/person.proto'})
        self.assertIn('people/person.proto', context.external_refs)

    def test_missing_local_definition(self):
        _, schemas = translator()
        with self.assertRaises(UnresolvableReferenceError) as cm:
            schemas.translate('Dog', SchemaItem.from_dict({'properties': {'owner': {'$ref': '#/definitions/Nobody'}}}))
        self.assertEqual(cm.exception.ref, '#/definitions/Nobody')

    def test_field_name_collision(self):
        _, schemas = translator()
        with self.assertRaises(NameCollisionError) as cm:
            schemas.translate('Dog', SchemaItem.from_dict({
                'properties': {'first-name': {'type': 'string'}, 'first_name': {'type': 'string'}},
            }))
        self.assertEqual(cm.exception.name, 'first_name')

    def test_nested_name_collision(self):
        _, schemas = translator()
        with self.assertRaises(NameCollisionError):
            schemas.translate('Dog', SchemaItem.from_dict({
                'properties': {
                    'size': {'type': 'string', 'enum': ['s', 'm']},
                    'Size': {'type': 'object', 'properties': {'x': {'type': 'integer'}}},
                },
            }))

    def test_field_options_only_in_options_mode(self):
        node = {'properties': {'name': {'type': 'string', 'x-options': {'deprecated': True}}}}
        _, schemas = translator()
        self.assertEqual(schemas.translate('A', SchemaItem.from_dict(node)).fields[0].options, {})
        _, schemas = translator(emit_options=True)
        self.assertEqual(schemas.translate('A', SchemaItem.from_dict(node)).fields[0].options, {'deprecated': True})


if __name__ == '__main__':
    unittest.main()
