"""
Value transform dispatch.

Turns the nodes matched for a dictionary entry into a single value, using an
inline callback, a callback registered on the parser, or one of the built-in
transforms.

Dispatch order (first match wins):
1. inline callback given in the entry
2. callback registered under the transform name
3. built-in transform of that name
4. unknown name: None (or UnknownTransformError under the strict policy)

Built-in transforms:
- parse: apply the entry's sub-dictionary to each matched node
- bool: "true", "1" or XPath true become True, anything else False
- datetime: parse the node text as a date/time (only the last node of a list)
- merge, merge_comma, merge_semicolon, merge_point: join trimmed texts with
  " ", ", ", "; " or ". "
"""

import logging

from datetime import datetime
from typing import Any, Callable, Dict, Optional

from ..interfaces import TransformDispatcherInterface
from ..models import (
    BuiltinTransform,
    Callback,
    CallbackConvention,
    DictionaryEntry,
    InlineTransform,
    MatchSet,
    ParserConfig,
    PerNodePolicy,
    UnknownTransformPolicy,
)
from ..exceptions import DateParseError, UnexpectedMatchTypeError, UnknownTransformError
from ..utils import NodeUtils, StringUtils


TRUE_TEXTS = ('true', '1')

# Tried in order after ISO 8601
DATETIME_FORMATS = [
    '%Y-%m-%d %H:%M:%S.%f',      # 2023-10-03 16:26:23.886
    '%Y-%m-%d %H:%M:%S',         # 2023-10-03 16:26:23
    '%Y-%m-%d',                  # 2023-10-03
    '%d %B %Y',                  # 10 March 2016
    '%d %b %Y',                  # 10 Mar 2016
    '%d %B %Y %H:%M',            # 10 March 2016 14:30
    '%d %B %Y %H:%M:%S',         # 10 March 2016 14:30:00
    '%B %d, %Y',                 # March 10, 2016
    '%b %d, %Y',                 # Mar 10, 2016
    '%B %d %Y',                  # March 10 2016
    '%d.%m.%Y',                  # 10.03.2016
    '%d.%m.%Y %H:%M',            # 10.03.2016 14:30
    '%m/%d/%Y',                  # 3/10/2016
    '%m/%d/%Y %H:%M:%S',         # 3/10/2016 16:26:23
    '%m/%d/%Y %I:%M:%S %p',      # 4/2/2020 5:53:20 AM
    '%a, %d %b %Y %H:%M:%S %z',  # Thu, 10 Mar 2016 14:30:00 +0000
    '%a, %d %b %Y %H:%M:%S %Z',  # Thu, 10 Mar 2016 14:30:00 GMT
]


def parse_datetime(text: str, entry_key: Optional[str] = None) -> datetime:
    """
    Parse date/time text.

    Args:
        text: Date/time text, surrounding whitespace ignored
        entry_key: Dictionary key, reported in the error

    Returns:
        Parsed datetime

    Raises:
        DateParseError: If the text matches no supported format
    """
    if not StringUtils.safe_string_check(text):
        raise DateParseError("Cannot parse empty text as a date/time", source_value=text, entry_key=entry_key)

    cleaned = text.strip()
    try:
        return datetime.fromisoformat(cleaned.replace('Z', '+00:00'))
    except ValueError:
        pass

    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue

    raise DateParseError(f"Unrecognized date/time text '{cleaned}'", source_value=cleaned, entry_key=entry_key)


def text_to_bool(value: Any) -> bool:
    """True for XPath true and for the exact texts 'true' and '1'; everything else is False."""
    if value is True:
        return True
    return NodeUtils.node_text(value) in TRUE_TEXTS


class TransformDispatcher(TransformDispatcherInterface):
    """
    Applies an entry's transform to its matched nodes.

    Callback calling conventions:
    - WHOLE_SET: called once with the raw match (the node list, or the single node/scalar)
    - PER_NODE: called once per node. Over a node list the LAST_WINS policy keeps only
      the last call's result (an empty list when no node matched); COLLECT_ALL keeps all
      results in node order. Over a single match it is called once.
    """

    def __init__(self, config: ParserConfig,
                 sub_parser: Callable[[Any, Dict[str, DictionaryEntry], Any], Dict[str, Any]]):
        """
        Initialize the dispatcher.

        Args:
            config: Parser configuration holding the dispatch policies
            sub_parser: Function applying a sub-dictionary to one node,
                        called as sub_parser(document, dictionary, node)
        """
        self.config = config
        self.sub_parser = sub_parser
        self.logger = logging.getLogger(__name__)

    def dispatch(self, document: Any, match_set: MatchSet, entry: DictionaryEntry,
                 callbacks: Dict[str, Callback], entry_key: Optional[str] = None) -> Any:
        spec = entry.transform

        if isinstance(spec, InlineTransform):
            return self.apply_callback(spec.callback, match_set)

        callback = callbacks.get(spec.name)
        if callback is not None:
            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug(f"Applying registered callback '{spec.name}' for '{entry_key}'")
            return self.apply_callback(callback, match_set)

        if spec.builtin is not None:
            return self.apply_builtin(document, spec.builtin, match_set, entry, entry_key)

        return self._unknown_transform(spec.name, entry_key)

    def apply_callback(self, callback: Callback, match_set: MatchSet) -> Any:
        """Invoke a callback according to its calling convention."""
        if callback.convention is CallbackConvention.WHOLE_SET or not match_set.is_node_list:
            return callback(match_set.value)

        if self.config.per_node_policy is PerNodePolicy.COLLECT_ALL:
            return [callback(node) for node in match_set.value]

        value = []
        for node in match_set.value:
            value = callback(node)
        return value

    def apply_builtin(self, document: Any, builtin: BuiltinTransform, match_set: MatchSet,
                      entry: DictionaryEntry, entry_key: Optional[str] = None) -> Any:
        """
        Apply a built-in transform.

        Raises:
            DateParseError: If a datetime transform meets unparseable text
        """
        if builtin is BuiltinTransform.PARSE:
            return self._sub_parse(document, match_set, entry, entry_key)

        elif builtin is BuiltinTransform.BOOL:
            if match_set.is_node_list:
                return [text_to_bool(node) for node in match_set.value]
            return text_to_bool(match_set.value)

        elif builtin is BuiltinTransform.DATETIME:
            if match_set.is_node_list:
                if not match_set.value:
                    return []
                # only the last node counts
                return parse_datetime(NodeUtils.node_text(match_set.value[-1]), entry_key)
            return parse_datetime(NodeUtils.node_text(match_set.value), entry_key)

        # merge family
        if not match_set.is_node_list:
            return NodeUtils.trimmed_text(match_set.value)
        texts = [NodeUtils.trimmed_text(node) for node in match_set.value]
        return builtin.separator.join(texts).strip()

    def _sub_parse(self, document: Any, match_set: MatchSet, entry: DictionaryEntry,
                   entry_key: Optional[str]) -> Any:
        if match_set.is_node_list:
            return [self._sub_parse_node(document, node, entry, entry_key) for node in match_set.value]

        if NodeUtils.is_node(match_set.value):
            return [self.sub_parser(document, entry.dictionary, match_set.value)]

        self._report_unexpected_match(match_set.value, entry_key)
        return None

    def _sub_parse_node(self, document: Any, node: Any, entry: DictionaryEntry, entry_key: Optional[str]) -> Any:
        if not NodeUtils.is_node(node):
            self._report_unexpected_match(node, entry_key)
            return None
        return self.sub_parser(document, entry.dictionary, node)

    def _report_unexpected_match(self, value: Any, entry_key: Optional[str]) -> None:
        warning = UnexpectedMatchTypeError(
            f"Skipping parse of '{entry_key}': expected a node or node list, got {NodeUtils.describe(value)}",
            match_type=type(value).__name__,
            entry_key=entry_key
        )
        self.logger.warning(str(warning))

    def _unknown_transform(self, name: str, entry_key: Optional[str]) -> None:
        message = f"Unknown transform '{name}' for '{entry_key}'"
        if self.config.unknown_transform_policy is UnknownTransformPolicy.STRICT:
            raise UnknownTransformError(message, transform_name=name, entry_key=entry_key)
        self.logger.warning(f"{message}, value set to None")
        return None
