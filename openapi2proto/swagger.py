"""
In-memory model of a Swagger 2.0 document.

The loader hands over the decoded JSON/YAML tree as plain dicts and lists;
APIDefinition.from_dict turns it into the typed model the translators read.
Mapping order of the source document is preserved throughout.
"""

# pylint: disable=too-many-instance-attributes

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from openapi2proto.errors import DecodeError

HTTP_METHODS = ['get', 'put', 'post', 'delete', 'options', 'head', 'patch']
PRIMITIVE_TYPES = ['string', 'integer', 'number', 'boolean', 'file']


def _mapping(value: Any, where: str) -> Dict[Any, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(f"Expected a mapping at {where}, got {type(value).__name__}")
    return value


def _sequence(value: Any, where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(f"Expected a list at {where}, got {type(value).__name__}")
    return value


def _extensions(node: Dict[Any, Any]) -> Dict[str, Any]:
    return {str(k): v for k, v in node.items() if str(k).startswith('x-')}


def _label(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    return str(value)


@dataclass
class SchemaItem:
    """A schema node. Exactly one kind is active, see the kind property."""
    type: Union[str, List[str], None] = None
    format: str = ''
    description: str = ''
    enum: List[str] = field(default_factory=list)
    items: Optional['SchemaItem'] = None
    properties: Dict[str, 'SchemaItem'] = field(default_factory=dict)
    additional_properties: Union['SchemaItem', bool, None] = None
    all_of: List['SchemaItem'] = field(default_factory=list)
    required: List[str] = field(default_factory=list)
    ref: str = ''
    extensions: Dict[str, Any] = field(default_factory=dict)

    @property
    def type_name(self) -> str:
        """The effective type: the first non-null entry of a type list."""
        if isinstance(self.type, list):
            return next((t for t in self.type if t != 'null'), '')
        return self.type or ''

    @property
    def kind(self) -> str:
        type_name = self.type_name
        if self.ref:
            return 'reference'
        if self.enum and type_name in ('', 'string'):
            return 'enum'
        if type_name == 'object' or (not type_name and (self.properties or self.all_of or self.additional_properties)):
            return 'object'
        if type_name == 'array' or (not type_name and self.items is not None):
            return 'array'
        if type_name in PRIMITIVE_TYPES:
            return type_name
        return 'untyped'

    @classmethod
    def from_dict(cls, node: Any, where: str = 'schema') -> 'SchemaItem':
        node = _mapping(node, where)
        items = node.get('items')
        if isinstance(items, list):
            # tuple validation is not expressible in proto; the first item type is used
            items = items[0] if items else None
        additional = node.get('additionalProperties')
        if isinstance(additional, dict):
            additional = cls.from_dict(additional, f"{where}/additionalProperties")
        elif not isinstance(additional, bool):
            additional = None
        type_value = node.get('type')
        if type_value is not None and not isinstance(type_value, (str, list)):
            raise DecodeError(f"Expected a string at {where}/type, got {type(type_value).__name__}")
        return cls(
            type=type_value,
            format=str(node.get('format') or ''),
            description=str(node.get('description') or ''),
            enum=[_label(v) for v in _sequence(node.get('enum'), f"{where}/enum")],
            items=cls.from_dict(items, f"{where}/items") if items is not None else None,
            properties={str(name): cls.from_dict(prop, f"{where}/properties/{name}")
                        for name, prop in _mapping(node.get('properties'), f"{where}/properties").items()},
            additional_properties=additional,
            all_of=[cls.from_dict(part, f"{where}/allOf/{i}")
                    for i, part in enumerate(_sequence(node.get('allOf'), f"{where}/allOf"))],
            required=[str(r) for r in node['required']] if isinstance(node.get('required'), list) else [],
            ref=str(node.get('$ref') or ''),
            extensions=_extensions(node),
        )


@dataclass
class Parameter:
    """An operation parameter, a $ref to a global parameter, or a body parameter with a schema."""
    name: str = ''
    location: str = ''
    required: bool = False
    description: str = ''
    schema: Optional[SchemaItem] = None
    ref: str = ''
    extensions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, node: Any, where: str = 'parameter') -> 'Parameter':
        node = _mapping(node, where)
        if '$ref' in node:
            return cls(ref=str(node['$ref']))
        location = str(node.get('in') or '')
        if location == 'body':
            schema = SchemaItem.from_dict(node.get('schema'), f"{where}/schema")
        else:
            # non-body parameters carry their type inline
            schema = SchemaItem.from_dict({k: v for k, v in node.items() if k not in ('name', 'in', 'required', 'description')}, where)
        return cls(
            name=str(node.get('name') or ''),
            location=location,
            required=bool(node.get('required', False)),
            description=str(node.get('description') or ''),
            schema=schema,
            extensions=_extensions(node),
        )


@dataclass
class Response:
    """An operation response, or a $ref to a global response."""
    description: str = ''
    schema: Optional[SchemaItem] = None
    ref: str = ''

    @classmethod
    def from_dict(cls, node: Any, where: str = 'response') -> 'Response':
        node = _mapping(node, where)
        if '$ref' in node:
            return cls(ref=str(node['$ref']))
        schema = node.get('schema')
        return cls(
            description=str(node.get('description') or ''),
            schema=SchemaItem.from_dict(schema, f"{where}/schema") if schema is not None else None,
        )


@dataclass
class Operation:
    """One HTTP verb on one path."""
    method: str
    path: str
    operation_id: str = ''
    summary: str = ''
    description: str = ''
    parameters: List[Parameter] = field(default_factory=list)
    responses: Dict[str, Response] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)
    extensions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, method: str, path: str, node: Any) -> 'Operation':
        where = f"paths/{path}/{method}"
        node = _mapping(node, where)
        return cls(
            method=method,
            path=path,
            operation_id=str(node.get('operationId') or ''),
            summary=str(node.get('summary') or ''),
            description=str(node.get('description') or ''),
            parameters=[Parameter.from_dict(p, f"{where}/parameters/{i}")
                        for i, p in enumerate(_sequence(node.get('parameters'), f"{where}/parameters"))],
            responses={str(code): Response.from_dict(r, f"{where}/responses/{code}")
                       for code, r in _mapping(node.get('responses'), f"{where}/responses").items()},
            tags=[str(t) for t in _sequence(node.get('tags'), f"{where}/tags")],
            extensions=_extensions(node),
        )


@dataclass
class PathItem:
    """The operations of one path template plus the parameters shared by all of them."""
    path: str
    parameters: List[Parameter] = field(default_factory=list)
    operations: Dict[str, Operation] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, path: str, node: Any) -> 'PathItem':
        node = _mapping(node, f"paths/{path}")
        return cls(
            path=path,
            parameters=[Parameter.from_dict(p, f"paths/{path}/parameters/{i}")
                        for i, p in enumerate(_sequence(node.get('parameters'), f"paths/{path}/parameters"))],
            operations={method: Operation.from_dict(method, path, node[method])
                        for method in HTTP_METHODS if method in node},
        )


@dataclass
class Info:
    title: str = ''
    version: str = ''
    description: str = ''


@dataclass
class APIDefinition:
    """The root of a Swagger 2.0 document."""
    swagger: str = ''
    info: Info = field(default_factory=Info)
    host: str = ''
    base_path: str = ''
    schemes: List[str] = field(default_factory=list)
    paths: Dict[str, PathItem] = field(default_factory=dict)
    definitions: Dict[str, SchemaItem] = field(default_factory=dict)
    parameters: Dict[str, Parameter] = field(default_factory=dict)
    responses: Dict[str, Response] = field(default_factory=dict)
    extensions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, doc: Any, uri: str = '') -> 'APIDefinition':
        """
        Build the model from a decoded document.

        Raises:
            DecodeError: when the tree does not have the shape of a Swagger document.
        """
        try:
            doc = _mapping(doc, 'document root')
            info = _mapping(doc.get('info'), 'info')
            return cls(
                swagger=str(doc.get('swagger') or ''),
                info=Info(str(info.get('title') or ''), str(info.get('version') or ''), str(info.get('description') or '')),
                host=str(doc.get('host') or ''),
                base_path=str(doc.get('basePath') or ''),
                schemes=[str(s) for s in _sequence(doc.get('schemes'), 'schemes')],
                paths={str(path): PathItem.from_dict(str(path), item)
                       for path, item in _mapping(doc.get('paths'), 'paths').items()},
                definitions={str(name): SchemaItem.from_dict(schema, f"definitions/{name}")
                             for name, schema in _mapping(doc.get('definitions'), 'definitions').items()},
                parameters={str(name): Parameter.from_dict(p, f"parameters/{name}")
                            for name, p in _mapping(doc.get('parameters'), 'parameters').items()},
                responses={str(name): Response.from_dict(r, f"responses/{name}")
                           for name, r in _mapping(doc.get('responses'), 'responses').items()},
                extensions=_extensions(doc),
            )
        except DecodeError as e:
            if uri and not e.uri:
                raise DecodeError(e.message, uri) from e
            raise
