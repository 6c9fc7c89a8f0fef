import pytest

from frecency import ConfigurationError, Frecency

HOUR_MS = 60 * 60 * 1000


def make_engine(storage, clock, **kwargs):
    return Frecency('products', storage=storage, clock=clock, **kwargs)


def test_resource_type_is_required(storage):
    with pytest.raises(ConfigurationError):
        Frecency(storage=storage)
    assert storage.reads == 0


def test_prefix_of_stored_query_ranks_selection_first(storage, clock):
    frecency = make_engine(storage, clock)
    frecency.record('shoes', 'p1')

    ranked = frecency.rank('sho', [{'id': 'p2'}, {'id': 'p1'}], 'id')

    assert [r['id'] for r in ranked] == ['p1', 'p2']
    assert ranked[0]['_frecency_score'] == 75
    assert ranked[1]['_frecency_score'] == 0


def test_unrelated_query_falls_back_to_id(storage, clock):
    frecency = make_engine(storage, clock)
    frecency.record('red shoes', 'p1')
    clock.advance(2 * HOUR_MS)

    ranked = frecency.rank('blue shoes', [{'id': 'p1'}], 'id')

    assert ranked[0]['_frecency_score'] == 50


def test_more_frequent_selection_ranks_higher(storage, clock):
    frecency = make_engine(storage, clock)
    frecency.record('x', 'a')
    frecency.record('x', 'a')
    frecency.record('x', 'b')

    ranked = frecency.rank('x', [{'id': 'a'}, {'id': 'b'}, {'id': 'c'}])

    assert [r['id'] for r in ranked] == ['a', 'b', 'c']


def test_eviction_with_small_limit(storage, clock):
    frecency = make_engine(storage, clock, recent_selections_limit=2)
    frecency.record('q1', 'p1')
    frecency.record('q2', 'p2')
    frecency.record('q3', 'p3')

    ranked = frecency.rank('q1', [{'id': 'p1'}, {'id': 'p2'}, {'id': 'p3'}])

    assert ranked[2]['id'] == 'p1'
    assert ranked[2]['_frecency_score'] == 0
    assert frecency.get_stats()['ids_tracked'] == 2


def test_rank_does_not_touch_storage(storage, clock):
    frecency = make_engine(storage, clock)
    frecency.record('shoes', 'p1')
    reads, writes = storage.reads, storage.writes

    frecency.rank('shoes', [{'id': 'p1'}, {'id': 'p2'}])

    assert (storage.reads, storage.writes) == (reads, writes)


def test_rank_survives_storage_outage(storage, clock):
    frecency = make_engine(storage, clock)
    frecency.record('shoes', 'p1')

    storage.read_error = ConnectionError('down')
    with pytest.raises(ConnectionError):
        frecency.record('shoes', 'p2')

    ranked = frecency.rank('shoes', [{'id': 'p2'}, {'id': 'p1'}])
    assert [r['id'] for r in ranked] == ['p1', 'p2']


def test_engines_share_storage_by_resource_type(storage, clock):
    products = make_engine(storage, clock)
    users = Frecency('users', storage=storage, clock=clock)

    products.record('ann', 'u1')

    assert users.rank('ann', [{'id': 'u1'}])[0]['_frecency_score'] == 0
    assert set(storage.data) == {'frecency_products'}


def test_refresh_picks_up_other_writers(storage, clock):
    reader = make_engine(storage, clock)
    writer = make_engine(storage, clock)
    writer.record('shoes', 'p1')

    assert reader.rank('shoes', [{'id': 'p1'}])[0]['_frecency_score'] == 0
    reader.refresh()
    assert reader.rank('shoes', [{'id': 'p1'}])[0]['_frecency_score'] == 100


def test_numeric_id_ranks_without_refresh(storage, clock):
    frecency = make_engine(storage, clock)
    frecency.record('shoes', 42)

    ranked = frecency.rank('shoes', [{'id': 7}, {'id': 42}])

    assert [r['id'] for r in ranked] == [42, 7]
    assert ranked[0]['_frecency_score'] == 100
    assert list(frecency.store.snapshot().selections) == ['42']


def test_missing_query_ranks_like_empty_query(storage, clock):
    frecency = make_engine(storage, clock)
    frecency.record('shoes', 'p1')

    ranked = frecency.rank(None, [{'id': 'p2'}, {'id': 'p1'}])

    assert [r['id'] for r in ranked] == ['p1', 'p2']
    assert ranked[0]['_frecency_score'] == 75
