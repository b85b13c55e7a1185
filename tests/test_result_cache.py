import pytest

from verity.database.result_cache import ResultCache, ResultCacheRegistry
from verity.schemas.analysis import AnalysisResult, CacheState, Recommendation


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(tmp_path, clock):
    return ResultCache(tmp_path, ttl_seconds=3600, clock=clock)


def result(score=40):
    return AnalysisResult(risk_score=score, recommendation=Recommendation.NEGOTIATE)


def test_empty_cache(cache):
    assert cache.get_result() is None
    assert cache.state() == CacheState.EMPTY
    assert cache.is_expired()


def test_stored_result_is_stamped_and_returned(cache, clock):
    stored = cache.set_result(result())

    assert stored.timestamp == clock.now
    assert cache.get_result() == stored
    assert cache.state() == CacheState.FRESH
    assert not cache.is_expired()


def test_result_expires_after_ttl(cache, clock):
    cache.set_result(result())

    clock.now += 3599
    assert cache.get_result() is not None

    clock.now += 1
    assert cache.state() == CacheState.EXPIRED
    assert cache.get_result() is None
    assert cache.state() == CacheState.EMPTY
    assert not cache.path.exists()


def test_new_result_replaces_previous(cache):
    cache.set_result(result(10))
    cache.set_result(result(90))

    assert cache.get_result().risk_score == 90


def test_result_survives_reload(tmp_path, cache, clock):
    cache.set_result(result(55))

    reloaded = ResultCache(tmp_path, ttl_seconds=3600, clock=clock)

    assert reloaded.get_result().risk_score == 55


def test_expired_entry_is_purged_on_load(tmp_path, cache, clock):
    cache.set_result(result())
    clock.now += 7200

    reloaded = ResultCache(tmp_path, ttl_seconds=3600, clock=clock)

    assert reloaded.get_result() is None
    assert not reloaded.path.exists()


def test_corrupt_entry_is_purged_on_load(tmp_path, clock):
    (tmp_path / "verity_analysis.json").write_text("{not json", encoding="utf-8")

    cache = ResultCache(tmp_path, ttl_seconds=3600, clock=clock)

    assert cache.get_result() is None
    assert not cache.path.exists()


def test_clear_result(cache):
    cache.set_result(result())
    cache.clear_result()

    assert cache.get_result() is None
    assert not cache.path.exists()
    cache.clear_result()


def test_registry_isolates_sessions(tmp_path, clock):
    registry = ResultCacheRegistry(tmp_path, ttl_seconds=3600, clock=clock)

    registry.for_session("alice").set_result(result(20))

    assert registry.for_session("bob").get_result() is None
    assert registry.for_session("alice").get_result().risk_score == 20
    assert registry.for_session("alice") is registry.for_session("alice")


def test_session_ids_map_to_distinct_directories():
    normalize = ResultCacheRegistry.normalize_session_id

    assert normalize(None) == "default"
    assert normalize("") == "default"
    assert normalize("alice_smith") == "alice_smith"
    assert normalize("alice.smith") != normalize("alice_smith")
    assert normalize("../etc/passwd").startswith("h-")
    assert "/" not in normalize("../etc/passwd")
    assert normalize("x" * 200) != normalize("x" * 201)


def test_similar_session_ids_do_not_share_results(tmp_path, clock):
    registry = ResultCacheRegistry(tmp_path, ttl_seconds=3600, clock=clock)

    registry.for_session("alice.smith").set_result(result(77))

    assert registry.for_session("alice_smith").get_result() is None
    assert registry.for_session("alice.smith").get_result().risk_score == 77


def test_registry_holds_a_bounded_number_of_sessions(tmp_path, clock):
    registry = ResultCacheRegistry(tmp_path, ttl_seconds=3600, clock=clock, max_sessions=3)
    registry.for_session("keeper").set_result(result(61))

    for i in range(1000):
        registry.for_session(f"s{i}").get_result()

    assert len(registry) == 3
    # Evicted sessions reload their result from disk
    assert registry.for_session("keeper").get_result().risk_score == 61
