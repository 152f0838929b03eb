"""
Common utility functions for openapi2proto.
"""

# pylint: disable=line-too-long

import re
from typing import List


def proto_name(name) -> str:
    """Convert a name into a Protobuf identifier."""
    if isinstance(name, int):
        name = '_' + str(name)
    val = re.sub(r'[^a-zA-Z0-9_]', '_', name)
    if re.match(r'^[0-9]', val):
        val = '_' + val
    return val


def split_words(string: str) -> List[str]:
    """
    Split a snake_case, kebab-case, camelCase or PascalCase string into words.
    Runs of capitals are kept together ("HTTPStatus" gives "HTTP", "Status").

    Args:
        string (str): The string to split.

    Returns:
        List[str]: The words in order of appearance.
    """
    words: List[str] = []
    for chunk in re.split(r'[^a-zA-Z0-9]+', string):
        words.extend(re.findall(r'[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z0-9]+|[A-Z]+[0-9]*', chunk))
    return words


def snake(string: str) -> str:
    """
    Convert a string to snake_case from snake_case, camelCase, or PascalCase.
    The string can contain dots, which are preserved in the output.

    Args:
        string (str): The string to convert.

    Returns:
        str: The string in snake_case.
    """
    if '.' in string:
        return '.'.join(snake(s) for s in string.split('.'))
    if not string:
        return string
    return '_'.join(word.lower() for word in split_words(string))
