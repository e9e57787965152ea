import pytest

from tourplan.config import get_log_level, get_port, get_solver_config


def test_defaults(monkeypatch):
    for name in ("PORT", "LOG_LEVEL", "ROUTE_STRATEGY", "MAX_SOLVE_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    assert get_port() == 5000
    assert get_log_level() == "INFO"
    assert get_solver_config() == {"strategy": "nearest_neighbor", "max_solve_seconds": 5}


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("ROUTE_STRATEGY", "two_opt")
    monkeypatch.setenv("MAX_SOLVE_SECONDS", "2")
    assert get_port() == 8080
    assert get_log_level() == "DEBUG"
    assert get_solver_config() == {"strategy": "two_opt", "max_solve_seconds": 2}


def test_unknown_strategy_rejected(monkeypatch):
    monkeypatch.setenv("ROUTE_STRATEGY", "fastest")
    with pytest.raises(ValueError):
        get_solver_config()
