"""
Namespace table shared by every metadata store.

The table is read once from the bundled JSON-LD context: each context entry
whose value is an absolute http(s) IRI becomes a prefix.
"""
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from rdflib import Namespace

CONTEXT_PATH = Path(__file__).parent / "data" / "context.json"

RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"

def load_context(path: Path = CONTEXT_PATH) -> Dict[str, Any]:
    """Returns the ``@context`` object of a JSON-LD context document."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)["@context"]

def build_namespaces(context: Dict[str, Any]) -> Dict[str, Namespace]:
    return {
        prefix: Namespace(value)
        for prefix, value in context.items()
        if isinstance(value, str) and value.startswith("http")
    }

@lru_cache(maxsize=None)
def default_context() -> Dict[str, Any]:
    return load_context()

@lru_cache(maxsize=None)
def default_namespaces() -> Dict[str, Namespace]:
    return build_namespaces(default_context())
