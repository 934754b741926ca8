from typing import List, Optional

import pytest

from berryfilter import Build, FieldContext, SchemaBuilder, normalize_filters
from berryfilter.hooks import FIELD_ARGS, INIT, INPUT_FIELDS
from berryfilter.introspection import Source
from berryfilter.plugin import CustomFilter
from tests.models import Post, User


def _noop(query_builder, value, build, context):
    return None


FILTERS = [
    {'entityName': 'User', 'fieldName': 'minAge', 'typeDescriptor': 'Int', 'modifier': _noop},
    {'entityName': 'User', 'fieldName': 'name', 'typeDescriptor': 'String', 'modifier': _noop},
    {'entityName': 'User', 'fieldName': 'mood', 'typeDescriptor': 'UnknownScalar', 'modifier': _noop},
]


@pytest.fixture
def setup():
    builder = SchemaBuilder()
    plugin = CustomFilter(normalize_filters(FILTERS)).install(builder)
    build = Build()
    builder.apply_hooks(INIT, {}, build, None)
    return builder, plugin, build


def _ctx(self_name, field_name, type_, source, **scope):
    return FieldContext(
        self_name=self_name,
        field={'name': field_name, 'type': type_, 'description': None},
        scope={'source': source, **scope},
    )


def test_connection_field_of_filtered_entity_gets_argument(setup):
    builder, plugin, build = setup
    users_connection = type('UsersConnection', (), {})
    ctx = _ctx('Query', 'allUsers', users_connection, Source('table', 'User', User), is_connection=True)
    args = builder.apply_hooks(FIELD_ARGS, {'first': {'type': Optional[int]}}, build, ctx)
    assert list(args) == ['first', 'customFilter']
    assert args['customFilter']['type'] == Optional[build.get_type_by_name('UserCustomFilter')]
    assert args['customFilter']['description'] == 'Custom Filter'
    assert [s.field_name for s in plugin.dispatcher.entries('Query.allUsers')] == ['minAge', 'name']
    assert len(ctx.arg_data_generators) == 1
    assert plugin.dispatcher.field_identities == ['Query.allUsers']


def test_list_field_gets_argument(setup):
    builder, plugin, build = setup
    user_cls = type('User', (), {})
    ctx = _ctx('Query', 'usersList', List[user_cls], Source('table', 'User', User), is_simple_collection=True)
    args = builder.apply_hooks(FIELD_ARGS, {}, build, ctx)
    assert 'customFilter' in args


def test_entity_without_filters_is_left_alone(setup):
    builder, plugin, build = setup
    posts_connection = type('PostsConnection', (), {})
    ctx = _ctx('Query', 'allPosts', posts_connection, Source('table', 'Post', Post), is_connection=True)
    assert builder.apply_hooks(FIELD_ARGS, {}, build, ctx) == {}
    assert not plugin.dispatcher.is_registered('Query.allPosts')
    assert ctx.arg_data_generators == []


@pytest.mark.parametrize(
    "scope",
    [
        {},
        {'is_connection': False, 'is_simple_collection': False},
    ],
)
def test_non_collection_field_is_skipped(setup, scope):
    builder, plugin, build = setup
    user_cls = type('User', (), {})
    ctx = _ctx('Post', 'author', Optional[user_cls], Source('table', 'User', User), **scope)
    assert builder.apply_hooks(FIELD_ARGS, {}, build, ctx) == {}


def test_field_without_filterable_source_is_skipped(setup):
    builder, plugin, build = setup
    users_connection = type('UsersConnection', (), {})
    for source in (None, Source('view', 'User', User)):
        ctx = _ctx('Query', 'someUsers', users_connection, source, is_connection=True)
        assert builder.apply_hooks(FIELD_ARGS, {}, build, ctx) == {}


def test_repeated_injection_is_stable(setup):
    builder, plugin, build = setup
    users_connection = type('UsersConnection', (), {})
    ctx = _ctx('Query', 'allUsers', users_connection, Source('table', 'User', User), is_connection=True)
    args = builder.apply_hooks(FIELD_ARGS, {}, build, ctx)
    again = builder.apply_hooks(FIELD_ARGS, args, build, ctx)
    assert list(again) == ['customFilter']
    assert len(ctx.arg_data_generators) == 1
    assert len(plugin.dispatcher.entries('Query.allUsers')) == 2


def test_existing_argument_is_not_replaced(setup):
    builder, plugin, build = setup
    users_connection = type('UsersConnection', (), {})
    ctx = _ctx('Query', 'allUsers', users_connection, Source('table', 'User', User), is_connection=True)
    mine = {'type': Optional[str], 'description': 'Already here'}
    args = builder.apply_hooks(FIELD_ARGS, {'customFilter': mine}, build, ctx)
    assert args['customFilter'] is mine


def test_hook_returning_none_is_an_error():
    builder = SchemaBuilder()
    builder.hook(INIT, lambda value, build, context: None)
    with pytest.raises(ValueError):
        builder.apply_hooks(INIT, {}, Build(), None)


def test_unknown_stage_is_rejected():
    with pytest.raises(ValueError):
        SchemaBuilder().hook('object:fields', lambda v, b, c: v)


def test_install_registers_one_hook_per_stage():
    builder = SchemaBuilder()
    plugin = CustomFilter(normalize_filters(FILTERS)).install(builder)
    assert builder.hooks_for(INIT) == [plugin.type_builder.create_types]
    assert builder.hooks_for(INPUT_FIELDS) == [plugin.type_builder.populate_fields]
    assert builder.hooks_for(FIELD_ARGS) == [plugin.injector.inject]
