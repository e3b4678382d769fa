import logging

import pytest

from lazyforms.app import log_level


@pytest.mark.parametrize("name, expected", [
    ("DEBUG", logging.DEBUG),
    ("warning", logging.WARNING),
    ("verbose", logging.INFO),
    ("BASIC_FORMAT", logging.INFO),
    ("", logging.INFO),
    (None, logging.INFO),
])
def test_log_level(name, expected):
    assert log_level(name) == expected


def test_stream_route_is_registered(app):
    assert "/api/stream" in {rule.rule for rule in app.url_map.iter_rules()}
