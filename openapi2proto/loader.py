"""
Document loading for the OpenAPI to Protobuf converter.

Reads a document from a local path, a file:// URL or over HTTP(S) and decodes
it from JSON or YAML into plain dicts and lists.
"""

import json
import logging
import os
from typing import Any, Dict
from urllib.parse import urlparse

import requests
import yaml

from openapi2proto.errors import DecodeError

logger = logging.getLogger(__name__)


class DocumentLoader:
    """
    Fetches and decodes documents, caching both by location.

    Attributes:
        timeout: Timeout in seconds for HTTP requests.
    """

    def __init__(self, timeout: int = 30) -> None:
        self.timeout = timeout
        self.content_cache: Dict[str, str] = {}
        self.document_cache: Dict[str, Any] = {}

    def fetch_content(self, url: str) -> str:
        """
        Fetch content from a URL or file path.

        Args:
            url: The URL or file path to fetch content from.

        Returns:
            The content as a string.

        Raises:
            DecodeError: If the content cannot be fetched.
        """
        if url in self.content_cache:
            return self.content_cache[url]

        parsed_url = urlparse(url)

        if parsed_url.scheme in ['http', 'https']:
            logger.debug("Fetching %s", url)
            try:
                response = requests.get(url, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise DecodeError(f"Unable to fetch document: {e}", url, e) from e
            content = response.text
        elif parsed_url.scheme == 'file' or len(parsed_url.scheme) <= 1:
            # single-letter schemes are Windows drive letters
            file_path = parsed_url.path if parsed_url.scheme == 'file' else url
            if os.name == 'nt' and parsed_url.scheme == 'file' and file_path.startswith('/'):
                file_path = file_path[1:]
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    content = f.read()
            except OSError as e:
                raise DecodeError(f"Unable to read document: {e}", url, e) from e
        else:
            raise DecodeError(f"Unsupported URL scheme: {parsed_url.scheme}", url)

        self.content_cache[url] = content
        return content

    def load_document(self, url: str) -> Any:
        """
        Fetch a document and decode it, as JSON first and as YAML otherwise.

        Raises:
            DecodeError: If the content is neither valid JSON nor valid YAML.
        """
        if url in self.document_cache:
            return self.document_cache[url]
        content = self.fetch_content(url)
        try:
            document = json.loads(content)
        except json.JSONDecodeError:
            try:
                document = yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise DecodeError(f"Failed to parse document as JSON or YAML: {e}", url, e) from e
        if not isinstance(document, dict):
            raise DecodeError("Document root is not a mapping", url)
        self.document_cache[url] = document
        return document
