"""
Flattening normalizer for extracted values.

Raw per-entry results are built from lists (one item per matched node) which
are mostly singletons or empty. The functions here collapse them into the final
output shape:

- a list of one item becomes that item
- an empty list disappears (its key is removed from a mapping, it is dropped from a list)
- mappings are never collapsed, whatever their size
- at the outermost level only, a list of one item becomes that item

Children are normalized before their parent (post-order), and normalizing an
already normalized value changes nothing.
"""

from typing import Any, Collection, Dict, Mapping


# Marker for a child that must be dropped from its parent container
_EMPTY = object()


def flatten(value: Any, descend_mappings: bool = True) -> Any:
    """
    Normalize a value built from nested lists and mappings.

    Args:
        value: Scalar, list, tuple or mapping
        descend_mappings: When False, mappings found inside the value are taken as
                          already normalized and copied through untouched

    Returns:
        Normalized value; lists and tuples come back as lists, mappings as dicts
    """
    flattened = _flatten_children(value, descend_mappings)
    if isinstance(flattened, list) and len(flattened) == 1:
        return flattened[0]
    return flattened


def flatten_mapping(mapping: Mapping[str, Any], keep_raw: Collection[str] = (),
                    descend_mappings: bool = True) -> Dict[str, Any]:
    """
    Normalize every value of a mapping, removing keys whose value is empty.

    Args:
        mapping: Mapping to normalize
        keep_raw: Keys whose values are copied through untouched
        descend_mappings: When False, mappings nested in the values are not normalized again

    Returns:
        New dict preserving key order
    """
    result = {}
    for key, value in mapping.items():
        if key in keep_raw:
            result[key] = value
            continue
        child = _collapse(_flatten_children(value, descend_mappings))
        if child is not _EMPTY:
            result[key] = child
    return result


def _flatten_children(value: Any, descend_mappings: bool = True) -> Any:
    if isinstance(value, Mapping):
        if not descend_mappings:
            return value
        return flatten_mapping(value)
    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            child = _collapse(_flatten_children(item, descend_mappings))
            if child is not _EMPTY:
                items.append(child)
        return items
    return value


def _collapse(value: Any) -> Any:
    if isinstance(value, list):
        if not value:
            return _EMPTY
        if len(value) == 1:
            return value[0]
    return value
