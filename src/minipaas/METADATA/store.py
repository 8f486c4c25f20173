"""
Read-only query facade over the facts describing one service.
"""
from typing import Dict, Mapping, Optional, Union

from rdflib import Graph, Namespace, URIRef
from rdflib.term import Identifier, Node

from ..exceptions import UnresolvedPrefixError
from .namespaces import RDF_TYPE, default_namespaces

Subject = Union[str, Identifier]

class MetadataStore:
    """
    Facts about a single service subject, with prefix-aware lookups.

    Predicates are accepted as ``prefix:localName``, as the token ``a``
    (``rdf:type``) or as an absolute http(s) IRI.
    """
    def __init__(self,
                 service_id: str,
                 graph: Graph,
                 namespaces: Optional[Mapping[str, Namespace]] = None):
        self._id = URIRef(service_id)
        self._graph = graph
        self._namespaces: Dict[str, Namespace] = dict(
            namespaces if namespaces is not None else default_namespaces()
        )

    @property
    def id(self) -> URIRef:
        return self._id

    def __len__(self) -> int:
        return len(self._graph)

    def __repr__(self) -> str:
        return f"MetadataStore({self._id!s}, {len(self)} facts)"

    def resolve(self, predicate: str) -> URIRef:
        """
        Expands a predicate into an absolute IRI.

        :raises UnresolvedPrefixError: If the prefix is not in the namespace table.
        """
        if predicate == "a":
            return URIRef(RDF_TYPE)
        if predicate.startswith("http"):
            return URIRef(predicate)
        prefix, _, local_name = predicate.partition(":")
        namespace = self._namespaces.get(prefix)
        if namespace is None:
            raise UnresolvedPrefixError(prefix)
        return namespace[local_name]

    def get(self, *args) -> Optional[Node]:
        """
        Returns the first object matching a subject and predicate, or None.

        Called as ``get(predicate)`` the subject is the service itself;
        ``get(subject, predicate)`` queries any other subject, such as a blank
        node returned by an earlier lookup.
        """
        if len(args) == 1:
            subject: Subject = self._id
            predicate = args[0]
        elif len(args) == 2:
            subject, predicate = args
        else:
            raise TypeError(f"get() takes 1 or 2 arguments ({len(args)} given)")

        if not isinstance(subject, Identifier):
            subject = URIRef(subject)
        return next(self._graph.objects(subject, self.resolve(predicate)), None)
