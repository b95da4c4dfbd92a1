import logging

import pytest

import main
from roofpanels.utils.logger import get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("roofpanels")
    for h in logger.handlers:
        h.close()
    logger.handlers.clear()


def test_demo_prints_summary(capsys):
    assert main.main(["--remove", "0", "1"]) == 0
    out = capsys.readouterr().out
    assert "Panels:" in out
    assert "kWp" in out
    assert "m²" in out


def test_demo_imperial_custom_panel(capsys):
    args = ["--preset", "custom", "--custom-width", "65", "--custom-height", "39", "--units", "imperial"]
    assert main.main(args) == 0
    assert "ft²" in capsys.readouterr().out


def test_demo_reports_bad_input(capsys):
    assert main.main(["--watts", "0"]) == 1
    assert main.main(["--remove", "9999"]) == 1


def test_sample_roof_starts_at_origin():
    roof = main.sample_roof()
    assert len(roof) == 5
    assert roof[0] == main.ROOF_ORIGIN


def test_log_file_is_written(tmp_path):
    log_file = setup_logging(tmp_path, verbose=True)
    get_logger("tests").debug("hello from the tests")
    for h in logging.getLogger("roofpanels").handlers:
        h.flush()
    assert log_file.exists()
    assert "hello from the tests" in log_file.read_text(encoding="utf-8")


def test_console_only_logging():
    assert setup_logging() is None
    assert len(logging.getLogger("roofpanels").handlers) == 1


def test_get_logger_namespaces():
    assert get_logger("roofpanels.layout.grid").name == "roofpanels.layout.grid"
    assert get_logger("main").name == "roofpanels.main"
