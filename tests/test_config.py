import pytest

from token_locking import ConfigurationError, LockingConfig


def test_defaults_when_unset():
    config = LockingConfig.from_env({})
    assert config.lock_period_count == 3
    assert config.withdraw_period_count == 5
    assert config.period_duration == 100_000
    assert config.log_level == "INFO"
    assert config.log_file is None
    assert config.environment == "production"


def test_reads_environment_values():
    config = LockingConfig.from_env(
        {
            "LOCKING_LOCK_PERIODS": "0",
            "LOCKING_WITHDRAW_PERIODS": "12",
            "LOCKING_PERIOD_SECONDS": " 2592000 ",
            "LOCKING_LOG_LEVEL": "debug",
            "LOCKING_LOG_FILE": "/tmp/locking.json",
            "LOCKING_ENVIRONMENT": "staging",
        }
    )
    assert config.lock_period_count == 0
    assert config.withdraw_period_count == 12
    assert config.period_duration == 2_592_000
    assert config.log_level == "DEBUG"
    assert config.log_file == "/tmp/locking.json"
    assert config.environment == "staging"


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("LOCKING_WITHDRAW_PERIODS", "7")
    assert LockingConfig.from_env().withdraw_period_count == 7


@pytest.mark.parametrize(
    "env",
    [
        {"LOCKING_LOCK_PERIODS": "three"},
        {"LOCKING_LOCK_PERIODS": "-1"},
        {"LOCKING_WITHDRAW_PERIODS": "0"},
        {"LOCKING_PERIOD_SECONDS": "0"},
        {"LOCKING_LOG_LEVEL": "LOUD"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ConfigurationError):
        LockingConfig.from_env(env)


def test_config_is_frozen():
    config = LockingConfig()
    with pytest.raises(AttributeError):
        config.period_duration = 1  # type: ignore[misc]
