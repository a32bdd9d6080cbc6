import pytest

from vaccine_scheduler.core import config


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        (None, False),
        ('1', True),
        (' TRUE ', True),
        ('on', True),
        ('no', False),
        ('0', False),
    ],
)
def test_get_bool(value, expected: bool) -> None:
    assert config._get_bool(value) is expected


def test_get_list_splits_and_strips() -> None:
    assert config._get_list(' http://a.test , ,http://b.test', default=[]) == ['http://a.test', 'http://b.test']
    assert config._get_list(None, default=['http://localhost:4200']) == ['http://localhost:4200']


def test_validate_runtime_config_requires_database_url_in_production(monkeypatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'DATABASE_URL', config.DEFAULT_DATABASE_URL)

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()


def test_validate_runtime_config_accepts_explicit_database_url(monkeypatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'DATABASE_URL', 'postgresql://scheduler@db/vaccines')

    config.validate_runtime_config()
