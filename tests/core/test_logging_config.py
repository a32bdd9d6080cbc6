import json
import logging

from vaccine_scheduler.core.logging_config import ConsoleFormatter, JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name='vaccine_scheduler.services.reservation_coordinator',
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg='Appointment reserved',
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_context() -> None:
    payload = json.loads(JSONFormatter().format(_record(context={'appointment_id': 1, 'caregiver': 'carol'})))

    assert payload['level'] == 'INFO'
    assert payload['message'] == 'Appointment reserved'
    assert payload['context'] == {'appointment_id': 1, 'caregiver': 'carol'}


def test_console_formatter_appends_context_and_keeps_level_name() -> None:
    record = _record(context={'vaccine': 'Pfizer'})

    message = ConsoleFormatter('%(levelname)s %(message)s').format(record)

    assert message.endswith("Appointment reserved | {'vaccine': 'Pfizer'}")
    assert record.levelname == 'INFO'


def test_setup_logging_replaces_root_handlers(tmp_path) -> None:
    root_logger = logging.getLogger()
    previous_handlers = root_logger.handlers[:]
    previous_level = root_logger.level
    try:
        setup_logging(log_level='debug', use_json_format=True, log_file=str(tmp_path / 'logs' / 'scheduler.log'))

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 2
        assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)
        assert (tmp_path / 'logs' / 'scheduler.log').exists()
    finally:
        for handler in root_logger.handlers[:]:
            handler.close()
            root_logger.removeHandler(handler)
        for handler in previous_handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(previous_level)
