import os
import sys

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

import unittest
from openapi2proto.context import TranslationContext
from openapi2proto.errors import NameCollisionError, UnresolvableReferenceError
from openapi2proto.protomodel import render_message, render_rpc
from openapi2proto.schematranslator import SchemaTranslator
from openapi2proto.servicetranslator import ServiceTranslator, http_template, join_path
from openapi2proto.swagger import APIDefinition


def translate(doc, emit_options=False):
    doc = dict({'swagger': '2.0', 'info': {'title': 'Test'}}, **doc)
    context = TranslationContext(APIDefinition.from_dict(doc), 'test', emit_options)
    service = ServiceTranslator(context, SchemaTranslator(context)).translate('TestService')
    return context, service


class TestServiceTranslator(unittest.TestCase):
    def test_request_always_synthesized(self):
        context, service = translate({'paths': {'/ping': {'get': {'responses': {'200': {'description': 'ok'}}}}}})
        func = service.functions['GetPing']
        self.assertEqual(func.in_type, 'GetPingRequest')
        self.assertEqual(render_message(context.proto_file.messages['GetPingRequest']), "message GetPingRequest {}\n")
        self.assertEqual(func.out_type, 'google.protobuf.Empty')
        self.assertIn('google/protobuf/empty.proto', context.proto_file.imports)

    def test_verb_order_within_a_path(self):
        ok = {'responses': {'204': {'description': 'ok'}}}
        _, service = translate({'paths': {
            '/b': {'patch': ok, 'get': ok},
            '/a': {'delete': ok, 'post': ok, 'put': ok},
        }})
        self.assertEqual(list(service.functions), ['PutA', 'PostA', 'DeleteA', 'GetB', 'PatchB'])

    def test_path_level_parameters_are_merged(self):
        context, _ = translate({'paths': {'/pets/{id}': {
            'parameters': [{'name': 'id', 'in': 'path', 'type': 'string'}, {'name': 'trace', 'in': 'header', 'type': 'string'}],
            'get': {
                'parameters': [{'name': 'id', 'in': 'path', 'type': 'integer'}, {'name': 'verbose', 'in': 'query', 'type': 'boolean'}],
                'responses': {'200': {'description': 'ok'}},
            },
        }}})
        self.assertEqual(render_message(context.proto_file.messages['GetPetsIdRequest']),
                         "message GetPetsIdRequest {\n"
                         "  int64 id = 1;\n"
                         "  bool verbose = 2;\n"
                         "}\n")

    def test_response_messages(self):
        context, service = translate({'paths': {
            '/list': {'get': {'responses': {'200': {'description': 'ok', 'schema': {'type': 'array', 'items': {'type': 'string'}}}}}},
            '/count': {'get': {'responses': {'200': {'description': 'ok', 'schema': {'type': 'integer', 'format': 'int32'}}}}},
            '/stats': {'get': {'responses': {'201': {'description': 'ok', 'schema': {'type': 'object', 'properties': {'n': {'type': 'number'}}}}}}},
        }})
        messages = context.proto_file.messages
        self.assertEqual(service.functions['GetList'].out_type, 'GetListResponse')
        self.assertEqual(render_message(messages['GetListResponse']), "message GetListResponse {\n  repeated string items = 1;\n}\n")
        self.assertEqual(render_message(messages['GetCountResponse']), "message GetCountResponse {\n  int32 value = 1;\n}\n")
        self.assertEqual(render_message(messages['GetStatsResponse']), "message GetStatsResponse {\n  double n = 1;\n}\n")

    def test_first_success_response_wins(self):
        _, service = translate({
            'paths': {'/pets': {'post': {'responses': {
                'default': {'description': 'error', 'schema': {'$ref': '#/definitions/Error'}},
                '202': {'description': 'accepted', 'schema': {'$ref': '#/definitions/Pet'}},
                '400': {'description': 'bad'},
            }}}},
            'definitions': {'Pet': {'type': 'object'}, 'Error': {'type': 'object'}},
        })
        self.assertEqual(service.functions['PostPets'].out_type, 'Pet')

    def test_default_response(self):
        _, service = translate({
            'paths': {'/pets': {'get': {'responses': {'default': {'description': 'any', 'schema': {'$ref': '#/definitions/Pet'}}}}}},
            'definitions': {'Pet': {'type': 'object'}},
        })
        self.assertEqual(service.functions['GetPets'].out_type, 'Pet')

    def test_rpc_without_options(self):
        _, service = translate({'paths': {'/pets': {'post': {
            'summary': 'Add a pet',
            'parameters': [{'name': 'pet', 'in': 'body', 'schema': {'type': 'object', 'properties': {'name': {'type': 'string'}}}}],
            'responses': {'200': {'description': 'ok'}},
        }}}})
        self.assertEqual(render_rpc(service.functions['PostPets']),
                         "  // Add a pet\n"
                         "  rpc PostPets(PostPetsRequest) returns (google.protobuf.Empty) {}\n")

    def test_rpc_with_http_annotation(self):
        context, service = translate({'basePath': '/api/', 'paths': {'/pets/{id}': {'patch': {
            'parameters': [{'name': 'id', 'in': 'path', 'type': 'string'},
                           {'name': 'Pet Body', 'in': 'body', 'schema': {'type': 'object'}}],
            'responses': {'200': {'description': 'ok'}},
            'x-options': {'idempotency_level': 'IDEMPOTENT'},
        }}}}, emit_options=True)
        self.assertEqual(render_rpc(service.functions['PatchPetsId']),
                         '  rpc PatchPetsId(PatchPetsIdRequest) returns (google.protobuf.Empty) {\n'
                         '    option (google.api.http) = {\n'
                         '      patch: "/api/pets/{id}"\n'
                         '      body: "Pet_Body"\n'
                         '    };\n'
                         '    option idempotency_level = "IDEMPOTENT";\n'
                         '  }\n')
        self.assertIn('google/api/annotations.proto', context.proto_file.imports)

    def test_http_template_uses_field_names(self):
        _, service = translate({'paths': {'/items/{item-id}/parts/{part.no}': {'get': {
            'parameters': [{'name': 'item-id', 'in': 'path', 'type': 'string'},
                           {'name': 'part.no', 'in': 'path', 'type': 'integer'}],
            'responses': {'200': {'description': 'ok'}},
        }}}}, emit_options=True)
        self.assertEqual(service.functions['GetItemsItemIdPartsPartNo'].uri, '/items/{item_id}/parts/{part_no}')
        self.assertEqual(http_template('/v1/{a b}/c'), '/v1/{a_b}/c')

    def test_parameter_references(self):
        context, _ = translate({
            'paths': {'/pets': {'get': {'parameters': [{'$ref': '#/parameters/Limit'}], 'responses': {'200': {'$ref': '#/responses/Ok'}}}}},
            'parameters': {'Limit': {'name': 'limit', 'in': 'query', 'type': 'integer', 'format': 'int32', 'description': 'Page size.'}},
            'responses': {'Ok': {'description': 'ok'}},
        })
        self.assertEqual(render_message(context.proto_file.messages['GetPetsRequest']),
                         "message GetPetsRequest {\n  // Page size.\n  int32 limit = 1;\n}\n")

    def test_unknown_parameter_reference(self):
        with self.assertRaises(UnresolvableReferenceError):
            translate({'paths': {'/pets': {'get': {'parameters': [{'$ref': '#/parameters/Nope'}], 'responses': {}}}}})

    def test_rpc_name_collision(self):
        ok = {'responses': {'200': {'description': 'ok'}}}
        with self.assertRaises(NameCollisionError) as cm:
            translate({'paths': {'/pets/{id}': {'get': ok}, '/pets/id': {'get': ok}}})
        self.assertEqual(cm.exception.name, 'GetPetsId')

    def test_request_message_collides_with_definition(self):
        doc = {
            'paths': {'/pets': {'get': {'responses': {'200': {'description': 'ok'}}}}},
            'definitions': {'GetPetsRequest': {'type': 'object'}},
        }
        context = TranslationContext(APIDefinition.from_dict(dict(doc, swagger='2.0')), 'test')
        schemas = SchemaTranslator(context)
        context.add_message(schemas.translate('GetPetsRequest', context.definitions['GetPetsRequest']))
        with self.assertRaises(NameCollisionError):
            ServiceTranslator(context, schemas).translate('TestService')

    def test_join_path(self):
        self.assertEqual(join_path('', '/pets'), '/pets')
        self.assertEqual(join_path('/v1/', '/pets'), '/v1/pets')
        self.assertEqual(join_path('/v1', 'pets'), '/v1/pets')


if __name__ == '__main__':
    unittest.main()
