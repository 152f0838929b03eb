"""

Command line utility to convert an OpenAPI 2.0 (Swagger) document to a proto3 definition.

"""


import argparse
import logging
import sys

from openapi2proto import _version
from openapi2proto.errors import OpenApiToProtoError


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(prog='openapi2proto', description='Convert an OpenAPI 2.0 (Swagger) document to a proto3 definition.')
    parser.add_argument('--version', action='store_true', help='Print the version of openapi2proto.')
    parser.add_argument('spec', nargs='?', help='Path or URL of the Swagger document (JSON or YAML).')
    parser.add_argument('--out', help='Output .proto file. Referenced documents are written next to it. Prints to stdout when omitted.')
    parser.add_argument('--options', action='store_true', help='Annotate RPCs with google.api.http and emit x-options as field and method options.')
    parser.add_argument('--package', help='Package of the generated file. Derived from info.title by default.')
    parser.add_argument('--no-follow-refs', dest='follow_refs', action='store_false', help='Do not convert documents referenced by the root document.')
    parser.add_argument('--verbose', action='store_true', help='Log debug output.')
    return parser


def main(argv=None):
    """Main function for the command line utility."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f'openapi2proto {_version.version}')
        return

    if args.spec is None:
        parser.print_help()
        return

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    # imported late to keep --help fast
    from openapi2proto.openapitoproto import convert_openapi_to_proto

    try:
        proto_text = convert_openapi_to_proto(args.spec, args.out, emit_options=args.options,
                                              package=args.package, follow_refs=args.follow_refs)
        if not args.out:
            sys.stdout.write(proto_text)
        else:
            print(f'Converted {args.spec} to {args.out}')
    except OpenApiToProtoError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
