# carelog/core/test_environment.py
import pytest

from carelog.core.environment import AppMode, DemoModeOnlyError, Environment, resolve_app_mode


@pytest.mark.parametrize("value, expected", [
    ("production", AppMode.PRODUCTION),
    ("demo", AppMode.DEMO),
    (None, AppMode.DEMO),
    ("", AppMode.DEMO),
    ("Production", AppMode.DEMO),
    ("prod", AppMode.DEMO),
])
def test_resolve_app_mode_only_exact_production(value, expected):
    assert resolve_app_mode(value) is expected


def test_demo_collections_are_prefixed():
    env = Environment(AppMode.DEMO)
    assert env.collection_name('residents') == 'demo_residents'
    assert env.collection_name('records') == 'demo_records'
    assert env.collection_name('users') == 'demo_users'


def test_production_collections_are_unprefixed():
    env = Environment.from_config({'APP_MODE': 'production'})
    assert env.is_production
    assert env.collection_name('residents') == 'residents'


def test_missing_app_mode_defaults_to_demo():
    env = Environment.from_config({})
    assert env.is_demo


def test_require_demo_rejects_production():
    Environment(AppMode.DEMO).require_demo('seed')
    with pytest.raises(DemoModeOnlyError):
        Environment(AppMode.PRODUCTION).require_demo('seed')
