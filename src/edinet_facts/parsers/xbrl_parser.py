"""
Schema-less XBRL instance parser.

Builds a ParsedDocument (namespaces, contexts, nested elements) from raw
markup in a single forward scan. lxml's pull parser tokenizes the input and
_TreeBuilder keeps an explicit stack of open elements, so document depth
never touches the Python call stack.

Token rules:
1. start: push a new element named exactly as written ('prefix:local');
   contextRef/unitRef go to dedicated fields, xmlns:prefix declarations go
   to the namespace map
2. text: a run of character data between two markup tokens, trimmed;
   the LAST non-blank run seen while an element is on top of the stack
   becomes its value
3. end: pop; attach to the new top of stack, or to the top-level list

The input is parsed as a fragment inside a synthetic wrapper element, so
several top-level elements are allowed. The wrapper also binds every
prefix used in the markup to a placeholder namespace; declarations in the
document shadow these, and a prefix nobody declares is kept as written.
"""

import re
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from lxml import etree

from edinet_facts.models.element import ParsedDocument, TaggedElement


XML_NAMESPACE = 'http://www.w3.org/XML/1998/namespace'

_FRAGMENT_TAG = b'edinet_facts_fragment'
_PLACEHOLDER_URI = 'urn:edinet-facts:undeclared:{prefix}'
_FEED_CHUNK_SIZE = 1 << 20

# BOM, XML declaration, DOCTYPE and comments must stay outside the wrapper
_PROLOG = re.compile(
    rb'(?:\xef\xbb\xbf)?(?:<\?xml\s.*?\?>)?'
    rb'(?:\s+|<!--.*?-->|<!DOCTYPE[^\[>]*(?:\[.*?\])?\s*>)*',
    re.DOTALL
)
# Prefixes of element names and of attribute names
_USED_PREFIX = re.compile(
    rb'</?([A-Za-z_][\w.\-]*):[A-Za-z_]'
    rb'|\s([A-Za-z_][\w.\-]*):[A-Za-z_][\w.\-]*\s*='
)
_RESERVED_PREFIXES = frozenset({b'xml', b'xmlns'})

# libxml2 errors that mean open and close tags do not balance
_STRUCTURAL_ERROR_CODES = frozenset({
    etree.ErrorTypes.ERR_TAG_NOT_FINISHED,
    etree.ErrorTypes.ERR_TAG_NAME_MISMATCH,
    etree.ErrorTypes.ERR_LTSLASH_REQUIRED,
    etree.ErrorTypes.ERR_DOCUMENT_END,
    etree.ErrorTypes.ERR_NOT_WELL_BALANCED,
})


class ParseError(Exception):
    """
    Malformed markup; extraction for this document is aborted.

    Attributes:
        line: 1-based line of the error, if known
        column: 1-based column of the error, if known
    """

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class StructuralError(ParseError):
    """Open and close tags do not balance (unterminated or unmatched element)."""


class _TreeBuilder:
    """Builds TaggedElement trees from start/end tokens with an explicit stack."""

    def __init__(self):
        self.namespaces: Dict[str, str] = {}
        self.contexts: Dict[str, Dict[str, Any]] = {}
        self.elements: List[TaggedElement] = []

        self._stack: List[TaggedElement] = []

    def declare(self, prefix: Optional[str], uri: str):
        # Default namespace declarations carry no prefix to record
        if prefix:
            self.namespaces[prefix] = uri

    def start(self, name: str, attributes: Mapping[str, str]):
        element = TaggedElement(name=name)
        for key, value in attributes.items():
            if key == 'contextRef':
                element.context_ref = value
            elif key == 'unitRef':
                element.unit_ref = value
            else:
                element.attributes[key] = value

        self._stack.append(element)

    def end(self, value: Optional[str] = None):
        if not self._stack:
            raise StructuralError("Closing tag has no open element")

        element = self._stack.pop()
        element.value = value

        if element.local_name == 'context' and 'id' in element.attributes:
            self.contexts[element.attributes['id']] = _summarize_context(element)

        if self._stack:
            self._stack[-1].children.append(element)
        else:
            self.elements.append(element)

    def build(self) -> ParsedDocument:
        if self._stack:
            names = ', '.join(element.name for element in self._stack)
            raise StructuralError(
                f"Unexpected end of input with {len(self._stack)} unterminated element(s): {names}"
            )
        return ParsedDocument(
            namespaces=self.namespaces,
            contexts=self.contexts,
            elements=self.elements,
        )


def _element_name(element: etree._Element) -> str:
    """Qualified name with the prefix written in the source."""
    local = etree.QName(element).localname
    return f"{element.prefix}:{local}" if element.prefix else local


def _attribute_map(element: etree._Element) -> Dict[str, str]:
    """
    Attributes keyed by prefixed name.

    lxml reports namespaced attributes as '{uri}local'; the prefix is
    recovered from the bindings in scope.
    """
    attributes = {}
    prefixes_by_uri = None
    for key, value in element.attrib.items():
        if key.startswith('{'):
            uri, _, local = key[1:].partition('}')
            if uri == XML_NAMESPACE:
                prefix = 'xml'
            else:
                if prefixes_by_uri is None:
                    prefixes_by_uri = {u: p for p, u in element.nsmap.items() if p}
                prefix = prefixes_by_uri.get(uri)
            if prefix:
                key = f"{prefix}:{local}"
        attributes[key] = value
    return attributes


def _last_text_run(element: etree._Element) -> Optional[str]:
    """
    Last non-blank trimmed run of character data directly inside element.

    Runs are the text before the first child node and the tail after each
    child (elements, comments and processing instructions all end a run).
    """
    runs = [element.text]
    runs.extend(child.tail for child in element)
    for run in reversed(runs):
        if run and run.strip():
            return run.strip()
    return None


def _summarize_context(context: TaggedElement) -> Dict[str, Any]:
    """
    Collect entity and period metadata from an xbrli:context subtree.

    Returns:
        {
            'entity': 'E01234-000',
            'scheme': 'http://disclosure.edinet-fsa.go.jp',
            'period_type': 'instant',          # 'duration', 'forever' or None
            'instant': '2015-06-30',
            'start_date': None,
            'end_date': None,
            'members': {'jppfs_cor:ConsolidatedOrNonConsolidatedAxis': '...'}
        }
    """
    summary: Dict[str, Any] = {
        'entity': None,
        'scheme': None,
        'period_type': None,
        'instant': None,
        'start_date': None,
        'end_date': None,
        'members': {},
    }

    for element in context.iter():
        local = element.local_name
        if local == 'identifier':
            summary['entity'] = element.value
            summary['scheme'] = element.attributes.get('scheme')
        elif local == 'instant':
            summary['instant'] = element.value
            summary['period_type'] = 'instant'
        elif local == 'startDate':
            summary['start_date'] = element.value
            summary['period_type'] = 'duration'
        elif local == 'endDate':
            summary['end_date'] = element.value
            summary['period_type'] = 'duration'
        elif local == 'forever':
            summary['period_type'] = 'forever'
        elif local in ('explicitMember', 'typedMember'):
            dimension = element.attributes.get('dimension')
            if dimension is None:
                continue
            if local == 'typedMember' and element.children:
                summary['members'][dimension] = element.children[0].value
            else:
                summary['members'][dimension] = element.value

    return summary


def _make_parser(encoding: Optional[str]) -> etree.XMLPullParser:
    return etree.XMLPullParser(
        events=('start-ns', 'start', 'end'),
        encoding=encoding,
        huge_tree=True,
        resolve_entities=False,
        no_network=True,
        recover=False,
        remove_comments=False,
        remove_pis=False,
    )


def _fragment_chunks(data: bytes) -> Iterator[bytes]:
    """Yield the prolog, the wrapper start tag, the body in chunks, then the wrapper end tag."""
    prolog_end = _PROLOG.match(data).end()

    prefixes = {
        prefix
        for match in _USED_PREFIX.finditer(data)
        for prefix in match.groups()
        if prefix and prefix not in _RESERVED_PREFIXES
    }
    declarations = b''.join(
        b' xmlns:' + prefix + b'="'
        + _PLACEHOLDER_URI.format(prefix=prefix.decode('ascii')).encode('ascii') + b'"'
        for prefix in sorted(prefixes)
    )

    if prolog_end:
        yield data[:prolog_end]
    yield b'<' + _FRAGMENT_TAG + declarations + b'>'
    for offset in range(prolog_end, len(data), _FEED_CHUNK_SIZE):
        yield data[offset:offset + _FEED_CHUNK_SIZE]
    yield b'</' + _FRAGMENT_TAG + b'>'


def _drain_events(parser: etree.XMLPullParser, builder: _TreeBuilder, state: Dict[str, int]):
    """Forward pull-parser events to the builder, skipping the wrapper."""
    for event, payload in parser.read_events():
        if event == 'start-ns':
            # Placeholder bindings on the wrapper are not document namespaces
            if state['depth'] > 0:
                prefix, uri = payload
                builder.declare(prefix, uri)
        elif event == 'start':
            if state['depth'] > 0:
                builder.start(_element_name(payload), _attribute_map(payload))
            state['depth'] += 1
        else:
            state['depth'] -= 1
            if state['depth'] > 0:
                builder.end(_last_text_run(payload))
                # Children are no longer needed; the tail belongs to the parent's runs
                payload.clear(keep_tail=True)


def parse_document(text: Union[str, bytes]) -> ParsedDocument:
    """
    Parse an XBRL instance document into a ParsedDocument.

    CRITICAL: The whole input must be in memory; no schema validation is done.
    Element names are kept exactly as written and never resolved through
    their namespace URIs.

    Args:
        text: Document markup. str input is parsed as UTF-8 (any encoding
              declaration is overridden); bytes input honours the declaration.
              Several top-level elements are allowed.

    Returns:
        ParsedDocument with namespaces, contexts and top-level elements.
        Blank input yields an empty document.

    Raises:
        StructuralError: Unterminated elements at end of input, or a closing
                         tag that does not match an open element
        ParseError: Any other malformed markup

    Example:
        >>> doc = parse_document(
        ...     '<xbrli:xbrl xmlns:xbrli="http://www.xbrl.org/2003/instance" '
        ...     'xmlns:jppfs_cor="urn:jppfs">'
        ...     '<jppfs_cor:NetSales contextRef="CurrentYTDDuration">1000</jppfs_cor:NetSales>'
        ...     '</xbrli:xbrl>'
        ... )
        >>> root = doc.elements[0]
        >>> root.children[0].name, root.children[0].value
        ('jppfs_cor:NetSales', '1000')
    """
    if not text.strip():
        return ParsedDocument()

    if isinstance(text, str):
        data, encoding = text.encode('utf-8'), 'utf-8'
    else:
        data, encoding = text, None

    builder = _TreeBuilder()
    parser = _make_parser(encoding)
    state = {'depth': 0}
    try:
        for chunk in _fragment_chunks(data):
            parser.feed(chunk)
            _drain_events(parser, builder, state)
        parser.close()
        _drain_events(parser, builder, state)
    except etree.XMLSyntaxError as e:
        line, column = _error_position(e)
        error_cls = StructuralError if e.code in _STRUCTURAL_ERROR_CODES else ParseError
        raise error_cls(f"Malformed XBRL: {e.msg}", line=line, column=column) from e

    return builder.build()


def _error_position(error: etree.XMLSyntaxError) -> Tuple[Optional[int], Optional[int]]:
    position = getattr(error, 'position', None)
    if position:
        return position[0], position[1]
    return getattr(error, 'lineno', None), None
