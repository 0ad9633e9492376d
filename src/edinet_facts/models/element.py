"""
Schema-less element tree produced by the XBRL parser.

Design:
- TaggedElement exclusively owns its children (no parent links, no cycles)
- ParsedDocument is frozen once built
- All traversal is iterative (explicit stack), so nesting depth is unbounded
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


@dataclass
class TaggedElement:
    """
    One XBRL element with its text value and nested children.

    Attributes:
        name: Namespace-prefixed qualified name (e.g., 'jppfs_cor:NetSales')
        value: Last text token seen while the element was open
        attributes: Generic attributes (contextRef, unitRef and xmlns excluded)
        children: Child elements in document order
        context_ref: contextRef attribute, if present
        unit_ref: unitRef attribute, if present
    """
    name: str
    value: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List['TaggedElement'] = field(default_factory=list)
    context_ref: Optional[str] = None
    unit_ref: Optional[str] = None

    @property
    def local_name(self) -> str:
        """Name without its namespace prefix."""
        return self.name.rpartition(':')[2]

    @property
    def prefix(self) -> Optional[str]:
        """Namespace prefix, or None for unprefixed names."""
        prefix, sep, _ = self.name.rpartition(':')
        return prefix if sep else None

    def iter(self) -> Iterator['TaggedElement']:
        """Pre-order traversal of this element and all descendants."""
        stack = [self]
        while stack:
            element = stack.pop()
            yield element
            # Reversed so the first child is visited first
            stack.extend(reversed(element.children))

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize this subtree to plain dictionaries.

        Built bottom-up with an explicit stack so deep trees never hit the
        recursion limit.
        """
        converted: Dict[int, Dict[str, Any]] = {}
        stack: List[Tuple['TaggedElement', bool]] = [(self, False)]

        while stack:
            element, children_done = stack.pop()
            if not children_done:
                stack.append((element, True))
                stack.extend((child, False) for child in element.children)
                continue

            converted[id(element)] = {
                'name': element.name,
                'value': element.value,
                'attributes': dict(element.attributes),
                'children': [converted.pop(id(child)) for child in element.children],
                'context_ref': element.context_ref,
                'unit_ref': element.unit_ref,
            }

        return converted[id(self)]


@dataclass(frozen=True)
class ParsedDocument:
    """
    Result of parsing one XBRL instance document.

    Attributes:
        namespaces: Namespace prefix -> URI, from every xmlns:prefix declaration
        contexts: Context id -> period/entity metadata
        elements: Top-level elements in document order

    Example:
        >>> doc = parse_document(xbrl_text)
        >>> doc.namespaces['jppfs_cor']
        'http://disclosure.edinet-fsa.go.jp/taxonomy/jppfs/2013-08-31/jppfs_cor'
        >>> sum(1 for _ in doc.iter_elements())
        1432
    """
    namespaces: Mapping[str, str] = field(default_factory=dict)
    contexts: Mapping[str, Dict[str, Any]] = field(default_factory=dict)
    elements: Tuple[TaggedElement, ...] = ()

    def __post_init__(self):
        # Read-only views so the document cannot be mutated after parsing
        object.__setattr__(self, 'namespaces', MappingProxyType(dict(self.namespaces)))
        object.__setattr__(self, 'contexts', MappingProxyType(dict(self.contexts)))
        object.__setattr__(self, 'elements', tuple(self.elements))

    def iter_elements(self) -> Iterator[TaggedElement]:
        """Pre-order traversal over every element at every depth."""
        for element in self.elements:
            yield from element.iter()

    def count_elements(self) -> int:
        """Total number of elements, nested ones included."""
        return sum(1 for _ in self.iter_elements())

    def is_empty(self) -> bool:
        """True if the document has no top-level elements."""
        return not self.elements

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for diagnostics (JSON-compatible)."""
        return {
            'namespaces': dict(self.namespaces),
            'contexts': {key: dict(value) for key, value in self.contexts.items()},
            'elements': [element.to_dict() for element in self.elements],
        }
