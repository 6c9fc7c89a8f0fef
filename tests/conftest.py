from collections import defaultdict
from fnmatch import fnmatch

import pytest

START_MS = 1_700_000_000_000
MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


class MemoryStorage:
    """Dict-backed stand-in for RedisClient."""

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.reads = 0
        self.writes = 0
        self.fail_writes = False
        self.read_error = None

    def get(self, key):
        self.reads += 1
        if self.read_error is not None:
            raise self.read_error
        return self.data.get(key)

    def set(self, key, value):
        if self.fail_writes:
            return False
        self.writes += 1
        self.data[key] = value
        return True

    def keys(self, pattern):
        return [k for k in self.data if fnmatch(k, pattern)]

    def ping(self):
        return True


class FakeClock:
    def __init__(self, now=START_MS):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def check_invariants():
    def check(frecency, timestamps_limit, recent_selections_limit):
        ids = set(frecency.selections)
        recent = frecency.recent_selections.to_list()

        assert set(recent) == ids
        assert len(recent) == len(set(recent))
        assert len(recent) <= recent_selections_limit

        referenced = defaultdict(set)
        for query, bucket in frecency.queries.items():
            assert bucket, f"empty bucket for {query!r}"
            for selection in bucket:
                assert selection.id in ids
                referenced[selection.id].add(query)
                assert len(selection.selected_at) <= timestamps_limit
                assert selection.selected_at == sorted(selection.selected_at)

        for selection_id, selection in frecency.selections.items():
            assert selection.queries == referenced[selection_id]
            assert len(selection.selected_at) <= timestamps_limit
            assert selection.selected_at == sorted(selection.selected_at)

    return check
