import asyncio
import json
import threading

import pytest

from core import metrics
from core.config import (
    ConfigCache,
    ConfigError,
    ConfigLoader,
    LoadState,
    create_loader,
    get_default_config,
)
from core.config.loader import get_loader_settings
from core.storage import MemoryStorage, StorageUnavailableError

FLAT_YAML = (
    "title: Home\n"
    "tags:\n"
    "  - name: x\n"
    "    color: red\n"
    "services:\n"
    "  - title: A\n"
    "    url: http://a\n"
    "    tags: [x, y]\n"
    "  - title: B\n"
    "    url: http://b\n"
    "  - title: C\n"
    "    url: http://c\n"
    "    secrets: {token: abc}\n"
)

GROUPED_YAML = (
    "services:\n"
    "  Network:\n"
    "    - title: Router\n"
    "      url: http://router\n"
    "  Media:\n"
    "    - title: Plex\n"
    "      url: http://plex\n"
    "    - title: Jellyfin\n"
    "      url: http://jellyfin\n"
    "  Admin: []\n"
)


def _loader(storage, cache=None, sleep=None):
    return ConfigLoader(
        storage=storage,
        cache=cache if cache is not None else ConfigCache(),
        sleep=sleep,
    )


def _without_ids(cfg):
    data = cfg.to_dict()
    for group in data["services"]:
        for item in group["items"]:
            item.pop("id")
    return data


class FlakyStorage(MemoryStorage):
    """Fails `get` for the first `failures` calls."""

    def __init__(self, text: str, failures: int) -> None:
        super().__init__({"config.yml": text})
        self.failures = failures

    def get(self, key):
        if self.failures > 0:
            self.failures -= 1
            raise StorageUnavailableError("disk unavailable")
        return super().get(key)


def test_flat_services_single_untitled_group(recording_sleep):
    loader = _loader(
        MemoryStorage({"config.yml": FLAT_YAML}), sleep=recording_sleep
    )
    cfg = asyncio.run(loader.load())
    assert loader.state is LoadState.SUCCEEDED
    assert loader.attempts == 1
    assert recording_sleep.calls == []
    assert cfg.title == "Home"
    assert cfg.error is None
    assert len(cfg.services) == 1
    group = cfg.services[0]
    assert group.title is None
    assert [s.title for s in group.items] == ["A", "B", "C"]
    assert len({s.id for s in group.items}) == 3
    a = group.items[0]
    assert [(t.name, t.color) for t in a.tags] == [("x", "red"), ("y", "blue")]


def test_grouped_services_keep_declared_order():
    cfg = asyncio.run(
        _loader(MemoryStorage({"config.yml": GROUPED_YAML})).load()
    )
    assert [g.title for g in cfg.services] == ["Network", "Media", "Admin"]
    assert [len(g.items) for g in cfg.services] == [1, 2, 0]


def test_reload_equal_except_ids():
    storage = MemoryStorage({"config.yml": FLAT_YAML})
    first = asyncio.run(_loader(storage).load())
    second = asyncio.run(_loader(storage).load())
    assert _without_ids(first) == _without_ids(second)
    ids_first = {s.id for g in first.services for s in g.items}
    ids_second = {s.id for g in second.services for s in g.items}
    assert ids_first.isdisjoint(ids_second)


def test_only_theme_gives_defaults_plus_theme():
    cfg = asyncio.run(
        _loader(MemoryStorage({"config.yml": "theme: dark\n"})).load()
    )
    expected = get_default_config().to_dict()
    expected["theme"] = "dark"
    assert cfg.to_dict() == expected


def test_empty_and_unparseable_yaml_are_empty_documents():
    for text in ("", "   \n", "title: [unclosed\n", b"\xff\xfe\x00"):
        cfg = asyncio.run(
            _loader(MemoryStorage({"config.yml": text})).load()
        )
        assert cfg.error is None
        assert cfg.to_dict() == get_default_config().to_dict()


def test_missing_config_no_cache_returns_defaults_with_error(
    recording_sleep,
):
    loader = _loader(MemoryStorage(), sleep=recording_sleep)
    cfg = asyncio.run(loader.load())
    assert loader.state is LoadState.FALLBACK_DEFAULT
    assert loader.attempts == 3
    assert cfg.error == "Config not found"
    data = cfg.to_dict()
    data.pop("error")
    expected = get_default_config().to_dict()
    expected.pop("error")
    assert data == expected
    # 3 attempts -> exactly 2 constant delays
    assert recording_sleep.calls == [0.1, 0.1]


def test_missing_config_with_cache_returns_cached_instance(recording_sleep):
    cache = ConfigCache()
    storage = MemoryStorage({"config.yml": FLAT_YAML})
    good = asyncio.run(_loader(storage, cache=cache).load())
    assert cache.get() is good

    storage.remove("config.yml")
    loader = _loader(storage, cache=cache, sleep=recording_sleep)
    cfg = asyncio.run(loader.load())
    assert cfg is good
    assert cfg.error is None
    assert loader.state is LoadState.FALLBACK_CACHED
    assert len(recording_sleep.calls) == 2


def test_validation_failure_reports_pruned_tree():
    storage = MemoryStorage(
        {"config.yml": "services:\n  - title: no url\n"}
    )
    cfg = asyncio.run(_loader(storage).load())
    assert cfg.error
    report = json.loads(cfg.error)
    assert report["services"]["0"]["url"]["_errors"]
    assert '"_errors": []' not in cfg.error
    assert cfg.services == []


def test_transient_storage_failure_recovers(recording_sleep):
    storage = FlakyStorage(FLAT_YAML, failures=2)
    loader = _loader(storage, sleep=recording_sleep)
    cfg = asyncio.run(loader.load())
    assert loader.state is LoadState.SUCCEEDED
    assert loader.attempts == 3
    assert cfg.error is None
    assert len(recording_sleep.calls) == 2
    counters = metrics.snapshot()["counters"]
    assert (
        counters["config_load_failures_total{error_type=storage-unavailable}"]
        == 2
    )
    assert counters["config_load_total{outcome=loaded}"] == 1


def test_failed_load_does_not_overwrite_cache():
    cache = ConfigCache()
    storage = MemoryStorage({"config.yml": FLAT_YAML})
    good = asyncio.run(_loader(storage, cache=cache).load())
    storage.set("config.yml", "services: 5\n")
    cfg = asyncio.run(_loader(storage, cache=cache).load())
    assert cfg is good
    assert cache.get() is good


def test_real_sleep_path_is_non_blocking():
    async def _run():
        loader = ConfigLoader(
            storage=MemoryStorage(), cache=ConfigCache(), delay=0.001
        )
        other = asyncio.create_task(asyncio.sleep(0))
        cfg = await loader.load()
        await other
        return cfg

    cfg = asyncio.run(_run())
    assert cfg.error == "Config not found"


def test_loader_settings_from_env(monkeypatch):
    monkeypatch.setenv("MAFL_CONFIG_RETRIES", "5")
    monkeypatch.setenv("MAFL_CONFIG_RETRY_DELAY_MS", "250")
    loader = create_loader(storage=MemoryStorage())
    assert loader.retries == 5
    assert loader.delay == 0.25


def test_invalid_loader_settings_raise_config_error(monkeypatch):
    monkeypatch.setenv("MAFL_CONFIG_RETRIES", "0")
    with pytest.raises(ConfigError):
        get_loader_settings()


def test_non_string_group_titles_are_kept_as_written():
    text = (
        "services:\n"
        "  2024:\n"
        "    - {title: A, url: 'http://a'}\n"
        "  Yes:\n"
        "    - {title: B, url: 'http://b'}\n"
        "  Off: []\n"
    )
    loader = _loader(MemoryStorage({"config.yml": text}))
    cfg = asyncio.run(loader.load())
    assert loader.state is LoadState.SUCCEEDED
    assert cfg.error is None
    assert [g.title for g in cfg.services] == ["2024", "Yes", "Off"]
    assert [s.title for s in cfg.services[0].items] == ["A"]


def test_scalar_values_keep_their_yaml_types():
    cfg = asyncio.run(
        _loader(
            MemoryStorage({"config.yml": "checkUpdates: no\n"})
        ).load()
    )
    assert cfg.error is None
    assert cfg.check_updates is False


def test_falsy_yaml_roots_are_empty_documents():
    for text in ("false\n", "0\n", "''\n", "[]\n"):
        loader = _loader(MemoryStorage({"config.yml": text}))
        cfg = asyncio.run(loader.load())
        assert loader.state is LoadState.SUCCEEDED
        assert cfg.error is None
        assert cfg.to_dict() == get_default_config().to_dict()


def test_storage_is_read_off_the_event_loop_thread():
    seen = []

    class ThreadRecordingStorage(MemoryStorage):
        def exists(self, key):
            seen.append(threading.get_ident())
            return super().exists(key)

    async def _run():
        loop_thread = threading.get_ident()
        await _loader(
            ThreadRecordingStorage({"config.yml": FLAT_YAML})
        ).load()
        return loop_thread

    loop_thread = asyncio.run(_run())
    assert seen and loop_thread not in seen
