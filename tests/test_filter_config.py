import logging

import pytest
from sqlalchemy import func

from berryfilter import (
    OPERATOR_REGISTRY,
    FilterSpec,
    QueryBuilder,
    normalize_filters,
    operator_modifier,
    register_operator,
)
from tests.models import User


def _noop(query_builder, value, build, context):
    return None


def _other(query_builder, value, build, context):
    return None


def test_sequence_and_mapping_forms_normalize_identically():
    seq = [
        {'entityName': 'User', 'fieldName': 'minAge', 'typeDescriptor': 'Int', 'modifier': _noop},
        {'entity_name': 'User', 'field_name': 'tags', 'type_descriptor': '[String!]', 'modifier': _other,
         'options': {'description': 'Tag names'}},
        {'entityName': 'Post', 'fieldName': 'title', 'typeDescriptor': 'String!', 'modifier': _noop},
    ]
    mapping = {
        'User': {
            'minAge': {'fieldType': 'Int', 'modifier': _noop},
            'tags': {'fieldType': '[String!]', 'modifier': _other, 'options': {'description': 'Tag names'}},
        },
        'Post': {'title': {'fieldType': 'String!', 'modifier': _noop}},
    }
    assert normalize_filters(seq) == normalize_filters(mapping)
    out = normalize_filters(seq)
    assert list(out) == ['User', 'Post']
    assert list(out['User']) == ['minAge', 'tags']
    assert out['User']['tags'].description == 'Tag names'


def test_default_description_uses_base_type():
    spec = FilterSpec('User', 'emails', '[String!]!', _noop)
    assert spec.description == 'String in custom filter'


def test_duplicate_field_last_write_wins(caplog):
    filters = [
        {'entityName': 'Post', 'fieldName': 'status', 'typeDescriptor': 'String', 'modifier': _noop},
        {'entityName': 'Post', 'fieldName': 'rating', 'typeDescriptor': 'Float', 'modifier': _noop},
        {'entityName': 'Post', 'fieldName': 'status', 'typeDescriptor': 'Int', 'modifier': _other},
    ]
    with caplog.at_level(logging.WARNING, logger='berryfilter'):
        out = normalize_filters(filters)
    assert list(out['Post']) == ['status', 'rating']
    assert out['Post']['status'].type_descriptor == 'Int'
    assert out['Post']['status'].modifier is _other
    assert 'duplicate filter field Post.status' in caplog.text


def test_filter_spec_instances_pass_through():
    spec = FilterSpec('User', 'minAge', 'Int', _noop)
    assert normalize_filters([spec]) == {'User': {'minAge': spec}}


def test_empty_config():
    assert normalize_filters(None) == {}
    assert normalize_filters([]) == {}


@pytest.mark.parametrize(
    "raw",
    [
        {'entityName': 'User', 'fieldName': 'minAge', 'typeDescriptor': 'Int'},
        {'entityName': 'User', 'fieldName': 'minAge', 'typeDescriptor': 'Int', 'modifier': 'not callable'},
        {'entityName': 'User', 'fieldName': 'minAge', 'modifier': _noop},
        {'fieldName': 'minAge', 'typeDescriptor': 'Int', 'modifier': _noop},
    ],
)
def test_incomplete_entries_are_rejected(raw):
    with pytest.raises(ValueError):
        normalize_filters([raw])


def test_unsupported_forms_are_rejected():
    with pytest.raises(TypeError):
        normalize_filters(['minAge'])
    with pytest.raises(TypeError):
        normalize_filters({'User': ['minAge']})


def test_operator_modifier_rejects_unknown_operator():
    with pytest.raises(ValueError):
        operator_modifier('age', 'approximately')


def test_registered_operator_is_usable_by_operator_modifier():
    register_operator('longer_than', lambda col, v: func.length(col) > v)
    try:
        qb = QueryBuilder(User)
        operator_modifier('name', 'longer_than')(qb, 10, None, None)
        assert 'length(users.name) >' in str(qb.statement)
    finally:
        OPERATOR_REGISTRY.pop('longer_than', None)
