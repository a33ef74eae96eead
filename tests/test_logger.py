import logging

import pytest

from rastersample import setup_logging

CONFIG = """
version = 1
disable_existing_loggers = false

[formatters.default]
format = "%(levelname)s %(name)s %(message)s"

[handlers.console]
class = "logging.StreamHandler"
formatter = "default"
stream = "ext://sys.stderr"

[loggers.rastersample]
level = "DEBUG"
handlers = ["console"]
propagate = false
"""


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("rastersample")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_config_file_is_applied(tmp_path):
    path = tmp_path / "logging.toml"
    path.write_text(CONFIG)

    logger = setup_logging(path)

    assert logger.name == "rastersample"
    assert logger.level == logging.DEBUG
    assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)


def test_environment_variable_is_used(tmp_path, monkeypatch):
    path = tmp_path / "logging.toml"
    path.write_text(CONFIG)
    monkeypatch.setenv("RASTERSAMPLE_LOG_CFG", str(path))

    assert setup_logging().level == logging.DEBUG


def test_missing_config_falls_back_to_null_handler(tmp_path):
    logger = setup_logging(tmp_path / "absent.toml")

    assert [type(h) for h in logger.handlers] == [logging.NullHandler]


def test_directory_is_not_a_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        setup_logging(tmp_path)
