""" ServiceTranslator class for converting Swagger paths and operations to Protobuf RPCs """

# pylint: disable=line-too-long

import dataclasses
import logging
import re
from typing import Dict, List, Optional, Tuple

from openapi2proto.context import HTTP_IMPORT, TranslationContext
from openapi2proto.errors import NameCollisionError
from openapi2proto.naming import field_name, path_method_to_name
from openapi2proto.protomodel import Comment, RpcFunc, Service, new_message
from openapi2proto.schematranslator import SchemaTranslator
from openapi2proto.swagger import HTTP_METHODS, Operation, Parameter, PathItem, Response, SchemaItem

logger = logging.getLogger(__name__)

REQUEST_LOCATIONS = ['path', 'query', 'formData', 'body']
SUCCESS_CODES = ['200', '201', '202', '203', '204']
PLACEHOLDER = re.compile(r'\{([^{}]+)\}')


def join_path(base_path: str, path: str) -> str:
    """basePath and path template as one URI template."""
    base = base_path.rstrip('/')
    if not path.startswith('/'):
        path = '/' + path
    return base + path


def http_template(path: str) -> str:
    """Rename path placeholders after the request fields they bind to ("{item-id}" -> "{item_id}")."""
    return PLACEHOLDER.sub(lambda m: '{' + field_name(m.group(1)) + '}', path)


def operation_comment(operation: Operation) -> Comment:
    parts = [p for p in (operation.summary.strip(), operation.description.strip()) if p]
    if len(parts) == 2 and parts[0] == parts[1]:
        parts = parts[:1]
    return Comment('\n'.join(parts), {})


class ServiceTranslator:
    """
    Converts the paths of a document into one service.

    Every operation becomes an RPC taking a synthesized <Rpc>Request message
    built from its parameters. The response schema of the first successful
    response decides the return type.
    """

    def __init__(self, context: TranslationContext, schemas: SchemaTranslator) -> None:
        self.context = context
        self.schemas = schemas

    def translate(self, service_name: str) -> Service:
        """Convert all operations, paths in sorted order and verbs in HTTP_METHODS order."""
        service = Service(service_name, {})
        api = self.context.api
        for path in sorted(api.paths):
            path_item = api.paths[path]
            for method in HTTP_METHODS:
                operation = path_item.operations.get(method)
                if operation is None:
                    continue
                name = path_method_to_name(path, method, operation.operation_id)
                if name in service.functions:
                    raise NameCollisionError(name, f"service '{service_name}'", f"{method.upper()} {path}")
                service.functions[name] = self.translate_operation(name, path_item, operation)
        if service.functions and self.context.emit_options:
            self.context.proto_file.imports.add(HTTP_IMPORT)
        return service

    def parameters(self, path_item: PathItem, operation: Operation) -> List[Parameter]:
        """Path-level parameters followed by operation parameters; an operation parameter replaces the path-level one with the same name and location."""
        merged: Dict[Tuple[str, str], Parameter] = {}
        for param in path_item.parameters + operation.parameters:
            if param.ref:
                param = self.context.parameter(param.ref)
            merged[(param.name, param.location)] = param
        return list(merged.values())

    def translate_operation(self, name: str, path_item: PathItem, operation: Operation) -> RpcFunc:
        where = f"{operation.method.upper()} {operation.path}"
        request = new_message(f"{name}Request")
        body = ''
        number = 0
        for param in self.parameters(path_item, operation):
            if param.location not in REQUEST_LOCATIONS:
                logger.warning("Skipping %s parameter '%s' of %s", param.location, param.name, where)
                continue
            schema = param.schema or SchemaItem()
            if param.description and not schema.description:
                schema = dataclasses.replace(schema, description=param.description)
            number += 1
            self.schemas.add_field(request, param.name, schema, number)
            if param.location == 'body':
                body = field_name(param.name)
        self.context.add_message(request, where)

        out_type = self.response_type(name, operation, where)
        method = uri = ''
        options = {}
        if self.context.emit_options:
            method = operation.method
            uri = http_template(join_path(self.context.api.base_path, operation.path))
            if isinstance(operation.extensions.get('x-options'), dict):
                options = dict(operation.extensions['x-options'])
        else:
            body = ''
        return RpcFunc(operation_comment(operation), name, request.name, out_type, method, uri, body, options)

    def success_response(self, operation: Operation) -> Optional[Response]:
        """The first successful response: 200-204, then any other 2xx, then default."""
        codes = [c for c in SUCCESS_CODES if c in operation.responses]
        codes += sorted(c for c in operation.responses if re.fullmatch(r'2\d\d', c) and c not in SUCCESS_CODES)
        if 'default' in operation.responses:
            codes.append('default')
        if not codes:
            return None
        response = operation.responses[codes[0]]
        if response.ref:
            response = self.context.response(response.ref)
        return response

    def response_type(self, name: str, operation: Operation, where: str) -> str:
        response = self.success_response(operation)
        if response is None or response.schema is None:
            return self.context.empty_type()
        schema = response.schema
        if schema.kind == 'reference':
            return self.context.resolve(schema.ref).qualified_name

        message = new_message(f"{name}Response")
        if schema.kind == 'object':
            self.schemas.populate_object(message, schema)
        else:
            self.schemas.add_field(message, 'items' if schema.kind == 'array' else 'value', schema, 1, use_comment=False)
        self.context.add_message(message, where)
        return message.name
