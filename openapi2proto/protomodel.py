""" Intermediate Protobuf model and proto3 text rendering """

# pylint: disable=line-too-long

from typing import Any, Dict, List, NamedTuple, Set

indent = '  '

Comment = NamedTuple('Comment', [('content', str), ('tags', Dict[str, Any])])
Field = NamedTuple('Field', [('comment', 'Comment'), ('label', str), ('type', str), ('key_type', str), ('val_type', str), ('name', str), ('number', int), ('options', Dict[str, Any])])
Enum = NamedTuple('Enum', [('comment', 'Comment'), ('name', str), ('fields', Dict[str, 'Field'])])
Message = NamedTuple('Message', [('comment', 'Comment'), ('name', str), ('fields', List['Field']),
                                 ('messages', Dict[str, 'Message']), ('enums', Dict[str, 'Enum'])])
RpcFunc = NamedTuple('RpcFunc', [('comment', 'Comment'), ('name', str), ('in_type', str), ('out_type', str),
                                 ('method', str), ('uri', str), ('body', str), ('options', Dict[str, Any])])
Service = NamedTuple('Service', [('name', str), ('functions', Dict[str, 'RpcFunc'])])
ProtoFile = NamedTuple('ProtoFile',
                       [('messages', Dict[str, 'Message']), ('enums', Dict[str, 'Enum']),
                        ('services', Dict[str, 'Service']), ('imports', Set[str]),
                        ('options', Dict[str, Any]), ('package', str)])

NO_COMMENT = Comment('', {})


def new_message(name: str, comment: Comment = NO_COMMENT) -> Message:
    return Message(comment, name, [], {}, {})


def new_proto_file(package: str) -> ProtoFile:
    return ProtoFile({}, {}, {}, set(), {}, package)


def enum_value_names(enums: Dict[str, Enum]) -> Set[str]:
    """Value names declared by a group of sibling enums."""
    return {value for enum in enums.values() for value in enum.fields}


def render_option_value(value: Any) -> str:
    """Render a YAML/JSON scalar or mapping as a Protobuf option value."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        return '{ ' + ' '.join(f"{k}: {render_option_value(v)}" for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))) + ' }'
    if isinstance(value, list):
        return '[' + ', '.join(render_option_value(v) for v in value) + ']'
    text = str(value).replace('\\', '\\\\').replace('"', '\\"')
    return f'"{text}"'


def render_comment(comment: Comment, level: int) -> str:
    if not comment.content.strip():
        return ''
    proto_str = ''
    for line in comment.content.strip().splitlines():
        line = line.rstrip()
        proto_str += f"{indent*level}//{' ' if line else ''}{line}\n"
    return proto_str


def render_field(field: Field, level: int) -> str:
    proto_str = render_comment(field.comment, level)
    options = ''
    if field.options:
        options = ' [' + ', '.join(f"{k} = {render_option_value(v)}" for k, v in sorted(field.options.items())) + ']'
    if field.type == 'map':
        proto_str += f"{indent*level}map<{field.key_type}, {field.val_type}> {field.name} = {field.number}{options};\n"
    else:
        proto_str += f"{indent*level}{field.label}{' ' if field.label else ''}{field.type} {field.name} = {field.number}{options};\n"
    return proto_str


def render_enum(enum: Enum, level: int = 0) -> str:
    proto_str = render_comment(enum.comment, level)
    proto_str += f"{indent*level}enum {enum.name} {{\n"
    for field in enum.fields.values():
        proto_str += f"{indent*level}{indent}{field.name} = {field.number};\n"
    proto_str += f"{indent*level}}}\n"
    return proto_str


def render_message(message: Message, level: int = 0) -> str:
    proto_str = render_comment(message.comment, level)
    if not message.fields and not message.messages and not message.enums:
        return proto_str + f"{indent*level}message {message.name} {{}}\n"
    proto_str += f"{indent*level}message {message.name} {{\n"
    # nested declarations first, then fields
    for local_message in message.messages.values():
        proto_str += render_message(local_message, level+1)
    for enum in message.enums.values():
        proto_str += render_enum(enum, level+1)
    for field in message.fields:
        proto_str += render_field(field, level+1)
    proto_str += f"{indent*level}}}\n"
    return proto_str


def render_rpc(func: RpcFunc, level: int = 1) -> str:
    proto_str = render_comment(func.comment, level)
    signature = f"{indent*level}rpc {func.name}({func.in_type}) returns ({func.out_type})"
    if not func.method and not func.options:
        return proto_str + signature + " {}\n"
    proto_str += signature + " {\n"
    if func.method:
        proto_str += f"{indent*level}{indent}option (google.api.http) = {{\n"
        proto_str += f"{indent*level}{indent}{indent}{func.method}: {render_option_value(func.uri)}\n"
        if func.body:
            proto_str += f"{indent*level}{indent}{indent}body: {render_option_value(func.body)}\n"
        proto_str += f"{indent*level}{indent}}};\n"
    for name, value in sorted(func.options.items()):
        proto_str += f"{indent*level}{indent}option {name} = {render_option_value(value)};\n"
    proto_str += f"{indent*level}}}\n"
    return proto_str


def render_service(service: Service) -> str:
    proto_str = f"service {service.name} {{\n"
    for func in service.functions.values():
        proto_str += render_rpc(func)
    proto_str += "}\n"
    return proto_str


def render_proto_file(proto: ProtoFile) -> str:
    """
    Dump a ProtoFile in proto3 syntax.

    Blocks are separated by one blank line: syntax, package, imports (sorted),
    file options (sorted), messages and enums (each sorted by name), services.
    """
    blocks = ['syntax = "proto3";']
    if proto.package:
        blocks.append(f"package {proto.package};")
    if proto.imports:
        blocks.append('\n'.join(f'import "{import_file}";' for import_file in sorted(proto.imports)))
    if proto.options:
        blocks.append('\n'.join(f"option {name} = {render_option_value(value)};" for name, value in sorted(proto.options.items())))
    for name in sorted(proto.messages):
        blocks.append(render_message(proto.messages[name]).rstrip('\n'))
    for name in sorted(proto.enums):
        blocks.append(render_enum(proto.enums[name]).rstrip('\n'))
    for service in proto.services.values():
        blocks.append(render_service(service).rstrip('\n'))
    return '\n\n'.join(blocks) + '\n'
