"""
Parsers for service metadata documents in JSON-LD or Turtle.
"""
import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rdflib import Graph

from ..exceptions import MetadataError
from ..METADATA.namespaces import RDF_TYPE, default_context
from ..METADATA.store import MetadataStore

SERVICE_ID_BASE = "http://id.minipaas.org"

JSONLD_SUFFIXES = (".json", ".jsonld")
TURTLE_SUFFIXES = (".ttl", ".turtle")

def service_id(image_id: str) -> str:
    """
    Canonical identifier of the service packaged in an image.
    """
    return f"{SERVICE_ID_BASE}/{image_id}/service"

class MetadataParser:
    """
    Parses a metadata document into a MetadataStore, choosing the syntax by
    file extension.
    """
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        """
        :param context: JSON-LD context applied to plain JSON documents.
        """
        self.context = context if context is not None else default_context()

    def parse(self, image_id: str, path: Union[str, Path]) -> MetadataStore:
        """
        Parses a metadata file.

        :param image_id: Image the metadata was copied from.
        :param path: Path to a .json, .jsonld, .ttl or .turtle file.
        :return: Store whose subject is the service id of the image.
        :raises MetadataError: If the extension is unsupported or parsing fails.
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise MetadataError(f"cannot read {path}: {e}") from e
        return self.parse_from_string(image_id, content, path.suffix)

    def parse_from_string(self, image_id: str, content: str, suffix: str) -> MetadataStore:
        uri = service_id(image_id)
        suffix = suffix.lower()
        try:
            if suffix in TURTLE_SUFFIXES:
                graph = self._parse_turtle(uri, content)
            elif suffix in JSONLD_SUFFIXES:
                graph = self._parse_jsonld(uri, content)
            else:
                raise MetadataError(f"unsupported metadata format: {suffix!r}")
        except MetadataError:
            raise
        except Exception as e:
            raise MetadataError(f"cannot parse metadata for {image_id}: {e}") from e
        return MetadataStore(uri, graph)

    def _parse_turtle(self, uri: str, content: str) -> Graph:
        graph = Graph()
        graph.parse(data=content, format="turtle", publicID=uri)
        return graph

    def _parse_jsonld(self, uri: str, content: str) -> Graph:
        doc = json.loads(content)
        if not isinstance(doc, dict):
            raise MetadataError("JSON metadata must be an object")

        # Plain JSON describes the service implicitly; give it a context,
        # an identity and a type so it reads as JSON-LD.
        if "@context" not in doc:
            doc["@context"] = copy.deepcopy(self.context)
            if "@graph" not in doc:
                doc.setdefault("@id", uri)
                if "@type" not in doc and "rdf:type" not in doc and RDF_TYPE not in doc:
                    doc["@type"] = "mini:Service"

        graph = Graph()
        graph.parse(data=json.dumps(doc), format="json-ld", base=uri)
        return graph
