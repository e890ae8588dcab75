import logging

from cncsim import config


def test_travel_limits_default(monkeypatch):
    monkeypatch.delenv("CNCSIM_TRAVEL_LIMITS", raising=False)
    limits = config._parse_travel_limits()
    assert limits["x"] == (-500.0, 500.0)
    assert set(limits) == set(config.AXES)


def test_travel_limits_from_env(monkeypatch):
    monkeypatch.setenv("CNCSIM_TRAVEL_LIMITS", "10,-10, -5,5, -1,1, -2,2, -3,3")
    limits = config._parse_travel_limits()
    assert limits["x"] == (-10.0, 10.0)
    assert limits["b"] == (-3.0, 3.0)


def test_travel_limits_bad_env_falls_back(monkeypatch, caplog):
    monkeypatch.setenv("CNCSIM_TRAVEL_LIMITS", "1,2,3")
    with caplog.at_level(logging.WARNING, logger="cncsim.config"):
        limits = config._parse_travel_limits()
    assert limits["z"] == (-300.0, 300.0)
    assert "expected 10 values" in caplog.text

    monkeypatch.setenv("CNCSIM_TRAVEL_LIMITS", "a,b,c,d,e,f,g,h,i,j")
    assert config._parse_travel_limits()["y"] == (-400.0, 400.0)


def test_trace_level_registered():
    assert logging.getLevelName(config.TRACE) == "TRACE"
    assert hasattr(logging.getLogger("cncsim.test"), "trace")


def test_configure_logging_accepts_names(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    config.configure_logging("debug")
    config.configure_logging("nonsense")
    config.configure_logging(logging.WARNING)

    assert [c["level"] for c in calls] == [logging.DEBUG, logging.INFO, logging.WARNING]
