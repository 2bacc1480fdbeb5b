"""Test log level filtering, especially spew level."""

import pytest

from buildchecker.core.log import (
    LEVELS,
    ConsoleSink,
    FileSink,
    LogfireSink,
    OTLPSink,
    level_name,
    setup_logger,
)

MESSAGES = ["spew", "trace", "debug", "info", "warn", "error"]


def log_all(level, log_file, log_root):
    """Log one message per level through a file sink at `level`."""
    logger = setup_logger(
        log_root=log_root,
        run_name="test",
        console=ConsoleSink(enabled=False),
        otlp=OTLPSink(enabled=False),
        file=FileSink(enabled=True, level=level, path=str(log_file)),
        logfire=LogfireSink(enabled=False),
    )
    for name in MESSAGES:
        getattr(logger, name)(f"{name.upper()} message")
    logger.close()
    return log_file.read_text()


@pytest.mark.parametrize("level", MESSAGES)
def test_file_sink_level_filtering(tmp_path, level):
    """Messages at or above the sink level are written, the rest dropped."""
    content = log_all(level, tmp_path / f"{level}.log", tmp_path)

    threshold = MESSAGES.index(level)
    for i, name in enumerate(MESSAGES):
        if i >= threshold:
            assert f"{name.upper()} message" in content
        else:
            assert f"{name.upper()} message" not in content


def test_keyword_arguments_are_appended(tmp_path):
    log_file = tmp_path / "attrs.log"
    logger = setup_logger(
        log_root=tmp_path,
        run_name="test",
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True, level="info", path=str(log_file)),
    )

    logger.info("Fetched builds", branch="main", count=3)
    logger.close()

    line = log_file.read_text().strip()
    assert "Fetched builds" in line
    assert "branch='main'" in line
    assert "count=3" in line


def test_default_file_path_uses_run_name(tmp_path):
    logger = setup_logger(
        log_root=tmp_path,
        run_name="widgets-main",
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True),
    )
    logger.info("hello")
    logger.close()

    log_file = tmp_path / "widgets-main" / "buildchecker.log"
    assert "hello" in log_file.read_text()


def test_level_ordering():
    """Test level ordering: spew < trace < debug < info."""
    names = list(LEVELS)
    assert names == ["spew", "trace", "debug", "info", "warn", "error", "fatal"]
    assert all(
        LEVELS[a] < LEVELS[b] for a, b in zip(names, names[1:], strict=False)
    )

    # Verify exact values (spew=1, trace=3)
    assert LEVELS["spew"] == 1  # SEVERITY_NUMBER_TRACE
    assert LEVELS["trace"] == 3  # SEVERITY_NUMBER_TRACE3
    assert LEVELS["debug"] == 5  # SEVERITY_NUMBER_DEBUG
    assert LEVELS["info"] == 9  # SEVERITY_NUMBER_INFO


@pytest.mark.parametrize(
    ("num", "name"),
    [(1, "spew"), (2, "spew"), (3, "trace"), (9, "info"), (14, "warn"),
     (21, "fatal"), (0, "unknown")],
)
def test_level_name(num, name):
    assert level_name(num) == name
