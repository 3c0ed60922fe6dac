"""
Tests for the log formatter
"""
import logging

import pytest

from keyhub.logging_config import REDACTED, ExtraFieldsFormatter, is_sensitive_field


def _record(**extra):
    record = logging.LogRecord('keyhub.test', logging.INFO, __file__, 1, 'Webhook rejected', (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestExtraFieldsFormatter:
    """Test extra field rendering"""

    def test_plain_message(self):
        assert ExtraFieldsFormatter('%(message)s').format(_record()) == 'Webhook rejected'

    def test_extra_fields_are_sorted(self):
        line = ExtraFieldsFormatter('%(message)s').format(_record(uid='u1', source='vapi'))
        assert line == 'Webhook rejected | source=vapi uid=u1'

    def test_credentials_are_masked(self):
        line = ExtraFieldsFormatter('%(message)s').format(
            _record(signature='abc123', refresh_token='rt', source='facebook')
        )
        assert 'abc123' not in line
        assert '=rt' not in line
        assert f'signature={REDACTED}' in line
        assert 'source=facebook' in line


@pytest.mark.parametrize('name,sensitive', [
    ('signature', True),
    ('FB_APP_SECRET', True),
    ('accessToken', True),
    ('Authorization', True),
    ('uid', False),
    ('leadId', False),
])
def test_sensitive_names(name, sensitive):
    assert is_sensitive_field(name) is sensitive
