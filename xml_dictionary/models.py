"""
Core data models for the XML dictionary mapping engine.

This module defines the primary data structures used throughout the system:
dictionary entries, transform specifications, callbacks, match sets and the
parser configuration.
"""

import inspect

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from enum import Enum

from .exceptions import DictionaryError


# Name of the first callback parameter that marks a callback as taking the whole match set
WHOLE_SET_PARAMETER = "nodes"


class MatchKind(Enum):
    """Shape of a selector result."""
    SINGLE_NODE = "single_node"
    NODE_LIST = "node_list"


class BuiltinTransform(Enum):
    """Transforms available without registering a callback."""
    PARSE = "parse"
    BOOL = "bool"
    DATETIME = "datetime"
    MERGE = "merge"
    MERGE_COMMA = "merge_comma"
    MERGE_SEMICOLON = "merge_semicolon"
    MERGE_POINT = "merge_point"

    @property
    def separator(self) -> Optional[str]:
        """Join separator for the merge family, None for the other transforms."""
        return _MERGE_SEPARATORS.get(self)

    @classmethod
    def lookup(cls, name: str) -> Optional["BuiltinTransform"]:
        try:
            return cls(name)
        except ValueError:
            return None


_MERGE_SEPARATORS = {
    BuiltinTransform.MERGE: " ",
    BuiltinTransform.MERGE_COMMA: ", ",
    BuiltinTransform.MERGE_SEMICOLON: "; ",
    BuiltinTransform.MERGE_POINT: ". ",
}


class CallbackConvention(Enum):
    """How a callback is fed: the whole match set at once, or one node per call."""
    WHOLE_SET = "whole_set"
    PER_NODE = "per_node"


class PerNodePolicy(Enum):
    """What a per-node callback produces over a node list."""
    LAST_WINS = "last_wins"
    COLLECT_ALL = "collect_all"


class UnknownTransformPolicy(Enum):
    """What happens when a transform name matches neither a callback nor a built-in."""
    NULL = "null"
    STRICT = "strict"


def infer_convention(fn: Callable) -> CallbackConvention:
    """
    Infer the calling convention of a bare callable from its first declared parameter.

    A first parameter named ``nodes`` means the callback takes the whole match set;
    anything else, including callables without an inspectable signature, is per-node.
    """
    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError):
        return CallbackConvention.PER_NODE

    if params and params[0].name == WHOLE_SET_PARAMETER:
        return CallbackConvention.WHOLE_SET
    return CallbackConvention.PER_NODE


@dataclass
class Callback:
    """
    A user transform together with its calling convention.

    Attributes:
        fn: The callable producing a value
        convention: WHOLE_SET or PER_NODE; inferred from the signature when omitted
    """
    fn: Callable[[Any], Any]
    convention: Optional[CallbackConvention] = None

    def __post_init__(self):
        """Validate callable and settle the calling convention once."""
        if not callable(self.fn):
            raise TypeError(f"Callback must be callable, got {type(self.fn).__name__}")
        if self.convention is None:
            self.convention = infer_convention(self.fn)
        elif not isinstance(self.convention, CallbackConvention):
            self.convention = CallbackConvention(self.convention)

    @property
    def name(self) -> str:
        return getattr(self.fn, "__name__", repr(self.fn))

    def __call__(self, argument: Any) -> Any:
        return self.fn(argument)


def whole_set(fn: Callable[[Any], Any]) -> Callback:
    """Wrap ``fn`` so that it receives the whole match set."""
    return Callback(fn, CallbackConvention.WHOLE_SET)


def per_node(fn: Callable[[Any], Any]) -> Callback:
    """Wrap ``fn`` so that it receives one node per call."""
    return Callback(fn, CallbackConvention.PER_NODE)


@dataclass(frozen=True)
class InlineTransform:
    """Transform given directly as a callback inside the dictionary entry."""
    callback: Callback

    @property
    def name(self) -> str:
        return self.callback.name


@dataclass(frozen=True)
class NamedTransform:
    """
    Transform given by name.

    The name is looked up in the parser's callback table at dispatch time first;
    ``builtin`` is the built-in it falls back to, or None for unknown names.
    """
    name: str
    builtin: Optional[BuiltinTransform] = None


TransformSpec = Union[InlineTransform, NamedTransform]


def resolve_transform_spec(raw: Any) -> Optional[TransformSpec]:
    """
    Turn the transform value of a dictionary entry into a TransformSpec.

    Args:
        raw: None, a transform name, a BuiltinTransform, a Callback, a bare callable
             or an already resolved spec

    Returns:
        The resolved spec, or None when the entry declares no transform

    Raises:
        DictionaryError: If the value is none of the accepted kinds
    """
    if raw is None:
        return None
    if isinstance(raw, (InlineTransform, NamedTransform)):
        return raw
    if isinstance(raw, BuiltinTransform):
        return NamedTransform(raw.value, raw)
    if isinstance(raw, str):
        return NamedTransform(raw, BuiltinTransform.lookup(raw))
    if isinstance(raw, Callback):
        return InlineTransform(raw)
    if callable(raw):
        return InlineTransform(Callback(raw))
    raise DictionaryError(f"Unsupported transform specification: {raw!r}")


@dataclass
class DictionaryEntry:
    """
    Defines how one output key is extracted from the XML document.

    Attributes:
        xpath: XPath expression locating the nodes; takes precedence over tag_name
        tag_name: Element name to look up when no xpath is given
        namespace: Optional namespace URI constraining the tag_name lookup
        transform: Transform applied to the matched nodes (resolved to a TransformSpec)
        dictionary: Sub-dictionary applied to each matched node by the parse transform
        flatten: Whether singleton/empty collapsing applies to this entry's value
    """
    xpath: Optional[str] = None
    tag_name: Optional[str] = None
    namespace: Optional[str] = None
    transform: Any = None
    dictionary: Optional[Dict[str, "DictionaryEntry"]] = None
    flatten: bool = True

    def __post_init__(self):
        """Validate the selector and resolve the transform and sub-dictionary."""
        if not self.xpath and not self.tag_name:
            raise DictionaryError("Dictionary entry needs an xpath or a tag_name")
        self.transform = resolve_transform_spec(self.transform)
        if self.dictionary is not None:
            self.dictionary = build_dictionary(self.dictionary)
        if self.builtin is BuiltinTransform.PARSE and self.dictionary is None:
            raise DictionaryError("The parse transform requires a sub-dictionary")

    @property
    def uses_xpath(self) -> bool:
        return bool(self.xpath)

    @property
    def builtin(self) -> Optional[BuiltinTransform]:
        if isinstance(self.transform, NamedTransform):
            return self.transform.builtin
        return None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DictionaryEntry":
        """
        Build an entry from a plain mapping, e.g. one loaded from JSON or YAML.

        Accepts the classic key names (``xpath``, ``translation``, ``namespace``,
        ``process``, ``dictionary``, ``flatten``) and the descriptive aliases
        ``tag_name``, ``transform`` and ``sub_dictionary``.
        """
        if not isinstance(raw, Mapping):
            raise DictionaryError(f"Dictionary entry must be a mapping, got {type(raw).__name__}")

        return cls(
            xpath=raw.get("xpath"),
            tag_name=raw.get("tag_name", raw.get("translation")),
            namespace=raw.get("namespace"),
            transform=raw.get("transform", raw.get("process")),
            dictionary=raw.get("sub_dictionary", raw.get("dictionary")),
            flatten=raw.get("flatten", True),
        )


def build_dictionary(raw: Mapping[str, Any]) -> Dict[str, DictionaryEntry]:
    """
    Convert a mapping of keys to entries (or plain entry mappings) into a dictionary.

    Raises:
        DictionaryError: If the dictionary or one of its entries is malformed
    """
    if not isinstance(raw, Mapping):
        raise DictionaryError(f"Dictionary must be a mapping, got {type(raw).__name__}")

    dictionary = {}
    for key, definition in raw.items():
        if isinstance(definition, DictionaryEntry):
            dictionary[key] = definition
            continue
        try:
            dictionary[key] = DictionaryEntry.from_dict(definition)
        except DictionaryError as e:
            raise DictionaryError(f"Invalid dictionary entry '{key}': {e}", entry_key=key)
    return dictionary


@dataclass
class MatchSet:
    """
    Tagged result of resolving a selector.

    Attributes:
        kind: SINGLE_NODE or NODE_LIST
        value: The node or scalar XPath result for SINGLE_NODE, the ordered node list for NODE_LIST
    """
    kind: MatchKind
    value: Any

    @classmethod
    def single(cls, value: Any) -> "MatchSet":
        return cls(MatchKind.SINGLE_NODE, value)

    @classmethod
    def node_list(cls, nodes: List[Any]) -> "MatchSet":
        return cls(MatchKind.NODE_LIST, list(nodes))

    @property
    def is_node_list(self) -> bool:
        return self.kind is MatchKind.NODE_LIST

    @property
    def nodes(self) -> List[Any]:
        """Matched items as a list, whatever the kind."""
        if self.is_node_list:
            return self.value
        return [self.value]

    def __len__(self) -> int:
        return len(self.nodes)


@dataclass
class ParserConfig:
    """
    Behavioral switches of a dictionary parser.

    Attributes:
        per_node_policy: LAST_WINS keeps only the last per-node callback result over a node list,
                         COLLECT_ALL keeps every result in node order
        unknown_transform_policy: NULL yields None for unknown transforms, STRICT raises
        namespaces: Prefix to namespace URI mapping available to XPath selectors
    """
    per_node_policy: PerNodePolicy = PerNodePolicy.LAST_WINS
    unknown_transform_policy: UnknownTransformPolicy = UnknownTransformPolicy.NULL
    namespaces: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Coerce policy names to their enums."""
        if not isinstance(self.per_node_policy, PerNodePolicy):
            self.per_node_policy = PerNodePolicy(self.per_node_policy)
        if not isinstance(self.unknown_transform_policy, UnknownTransformPolicy):
            self.unknown_transform_policy = UnknownTransformPolicy(self.unknown_transform_policy)
        if self.namespaces is None:
            self.namespaces = {}
