import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from callwatch.monitoring.logger import JsonFormatter, get_logger


def test_get_logger_configures_once():
    logger = get_logger("tests.logger.once", level="warning")
    again = get_logger("tests.logger.once", level="debug")

    assert again is logger
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_get_logger_json_format():
    logger = get_logger("tests.logger.json", json_format=True)
    assert isinstance(logger.handlers[0].formatter, JsonFormatter)


def test_get_logger_text_format_by_default():
    logger = get_logger("tests.logger.text")
    assert not isinstance(logger.handlers[0].formatter, JsonFormatter)
    assert logger.level == logging.INFO


def test_json_formatter_includes_extras():
    record = logging.LogRecord(
        "callwatch.interceptor", logging.INFO, __file__, 10,
        "==> Execution time of %s :: %d ms", ("OrderService.placeOrder", 42), None,
    )
    record.call_group = "OrderService"
    record.elapsed_ms = 42

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "==> Execution time of OrderService.placeOrder :: 42 ms"
    assert payload["level"] == "INFO"
    assert payload["call_group"] == "OrderService"
    assert payload["elapsed_ms"] == 42
    assert "args" not in payload


def test_get_logger_reconfigure_updates_installed_handler():
    logger = get_logger("tests.logger.reconfigure", level="INFO", json_format=False)

    get_logger("tests.logger.reconfigure", level="ERROR", json_format=True, reconfigure=True)

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JsonFormatter)
    assert logger.level == logging.ERROR


def test_get_logger_leaves_foreign_handlers_alone():
    logger = logging.getLogger("tests.logger.foreign")
    foreign = logging.NullHandler()
    logger.addHandler(foreign)

    get_logger("tests.logger.foreign", json_format=True, reconfigure=True)

    assert logger.handlers == [foreign]


def test_get_logger_concurrent_calls_add_one_handler():
    workers = 8
    barrier = threading.Barrier(workers)

    def configure(_):
        barrier.wait()
        return get_logger("tests.logger.concurrent")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        loggers = set(pool.map(configure, range(workers)))

    assert len(loggers) == 1
    assert len(loggers.pop().handlers) == 1
