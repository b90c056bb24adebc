"""
Unit tests for dictionary models: entries, transform specifications, callbacks
and parser configuration.
"""

import pytest

from xml_dictionary.exceptions import DictionaryError
from xml_dictionary.models import (
    BuiltinTransform,
    Callback,
    CallbackConvention,
    DictionaryEntry,
    InlineTransform,
    MatchSet,
    NamedTransform,
    ParserConfig,
    PerNodePolicy,
    UnknownTransformPolicy,
    build_dictionary,
    infer_convention,
    per_node,
    resolve_transform_spec,
    whole_set,
)


class TestDictionaryEntry:
    """DictionaryEntry construction and validation."""

    def test_from_dict_with_classic_keys(self):
        entry = DictionaryEntry.from_dict({
            'translation': 'creator',
            'namespace': 'http://purl.org/dc/elements/1.1/',
            'process': 'merge_comma',
            'flatten': False,
        })

        assert entry.tag_name == 'creator'
        assert entry.namespace == 'http://purl.org/dc/elements/1.1/'
        assert entry.transform == NamedTransform('merge_comma', BuiltinTransform.MERGE_COMMA)
        assert entry.flatten is False
        assert not entry.uses_xpath

    def test_from_dict_with_descriptive_keys(self):
        entry = DictionaryEntry.from_dict({
            'xpath': '//author',
            'transform': 'parse',
            'sub_dictionary': {'name': {'xpath': './first'}},
        })

        assert entry.uses_xpath
        assert entry.builtin is BuiltinTransform.PARSE
        assert isinstance(entry.dictionary['name'], DictionaryEntry)
        assert entry.flatten is True

    def test_entry_without_selector_is_rejected(self):
        with pytest.raises(DictionaryError):
            DictionaryEntry(transform='bool')

    def test_parse_without_sub_dictionary_is_rejected(self):
        with pytest.raises(DictionaryError):
            DictionaryEntry(xpath='//author', transform='parse')

    def test_non_mapping_entry_is_rejected(self):
        with pytest.raises(DictionaryError):
            DictionaryEntry.from_dict('//author')

    def test_unknown_transform_name_is_kept_without_builtin(self):
        entry = DictionaryEntry(xpath='//title', transform='shout')

        assert entry.transform == NamedTransform('shout', None)
        assert entry.builtin is None

    def test_callable_transform_becomes_inline(self):
        def shout(node):
            return node.text.upper()

        entry = DictionaryEntry(xpath='//title', transform=shout)

        assert isinstance(entry.transform, InlineTransform)
        assert entry.transform.callback.convention is CallbackConvention.PER_NODE
        assert entry.transform.name == 'shout'


class TestBuildDictionary:
    """build_dictionary conversion of plain mappings."""

    def test_keeps_order_and_entries(self):
        existing = DictionaryEntry(xpath='//b')

        dictionary = build_dictionary({'a': {'xpath': '//a'}, 'b': existing})

        assert list(dictionary) == ['a', 'b']
        assert dictionary['b'] is existing

    def test_reports_failing_key(self):
        with pytest.raises(DictionaryError) as exc_info:
            build_dictionary({'good': {'xpath': '//a'}, 'bad': {'transform': 'bool'}})

        assert exc_info.value.entry_key == 'bad'
        assert "'bad'" in str(exc_info.value)

    def test_rejects_non_mapping(self):
        with pytest.raises(DictionaryError):
            build_dictionary(['xpath'])

    def test_nested_errors_surface(self):
        with pytest.raises(DictionaryError):
            build_dictionary({'outer': {'xpath': '//a', 'transform': 'parse', 'dictionary': {'inner': {}}}})


class TestTransformSpec:
    """resolve_transform_spec dispatch over the accepted kinds."""

    def test_none_means_no_transform(self):
        assert resolve_transform_spec(None) is None

    def test_builtin_enum(self):
        assert resolve_transform_spec(BuiltinTransform.BOOL) == NamedTransform('bool', BuiltinTransform.BOOL)

    def test_callback_object(self):
        callback = whole_set(len)

        spec = resolve_transform_spec(callback)

        assert spec == InlineTransform(callback)

    def test_resolved_spec_is_returned_as_is(self):
        spec = NamedTransform('merge', BuiltinTransform.MERGE)

        assert resolve_transform_spec(spec) is spec

    def test_unsupported_value(self):
        with pytest.raises(DictionaryError):
            resolve_transform_spec(42)

    @pytest.mark.parametrize('transform, separator', [
        (BuiltinTransform.MERGE, ' '),
        (BuiltinTransform.MERGE_COMMA, ', '),
        (BuiltinTransform.MERGE_SEMICOLON, '; '),
        (BuiltinTransform.MERGE_POINT, '. '),
        (BuiltinTransform.BOOL, None),
    ])
    def test_merge_separators(self, transform, separator):
        assert transform.separator == separator

    def test_lookup(self):
        assert BuiltinTransform.lookup('datetime') is BuiltinTransform.DATETIME
        assert BuiltinTransform.lookup('nope') is None


class TestCallbackConvention:
    """Calling convention inference and explicit selection."""

    def test_nodes_parameter_means_whole_set(self):
        def count(nodes):
            return len(nodes)

        assert infer_convention(count) is CallbackConvention.WHOLE_SET

    def test_other_parameter_means_per_node(self):
        assert infer_convention(lambda node: node) is CallbackConvention.PER_NODE

    def test_no_parameters_means_per_node(self):
        assert infer_convention(lambda: None) is CallbackConvention.PER_NODE

    def test_bound_method_ignores_self(self):
        class Collector:
            def gather(self, nodes):
                return nodes

        assert infer_convention(Collector().gather) is CallbackConvention.WHOLE_SET

    def test_explicit_helpers_override_parameter_names(self):
        assert per_node(lambda nodes: nodes).convention is CallbackConvention.PER_NODE
        assert whole_set(lambda node: node).convention is CallbackConvention.WHOLE_SET

    def test_convention_by_name(self):
        assert Callback(len, 'whole_set').convention is CallbackConvention.WHOLE_SET

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError):
            Callback('not callable')

    def test_callback_is_callable(self):
        assert per_node(str.upper)('abc') == 'ABC'


class TestMatchSetAndConfig:
    """MatchSet helpers and ParserConfig coercion."""

    def test_single_match_nodes(self):
        match = MatchSet.single('value')

        assert not match.is_node_list
        assert match.nodes == ['value']
        assert len(match) == 1

    def test_node_list_copies_input(self):
        nodes = ['a', 'b']
        match = MatchSet.node_list(nodes)
        nodes.append('c')

        assert match.value == ['a', 'b']

    def test_config_defaults(self):
        config = ParserConfig()

        assert config.per_node_policy is PerNodePolicy.LAST_WINS
        assert config.unknown_transform_policy is UnknownTransformPolicy.NULL
        assert config.namespaces == {}

    def test_config_coerces_names(self):
        config = ParserConfig(per_node_policy='collect_all', unknown_transform_policy='strict', namespaces=None)

        assert config.per_node_policy is PerNodePolicy.COLLECT_ALL
        assert config.unknown_transform_policy is UnknownTransformPolicy.STRICT
        assert config.namespaces == {}

    def test_config_rejects_unknown_policy(self):
        with pytest.raises(ValueError):
            ParserConfig(per_node_policy='first_wins')
