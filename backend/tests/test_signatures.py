"""
Tests for webhook signatures and OAuth state tokens
"""
import hashlib
import hmac

import pytest

from keyhub.services.signatures import (
    decode_oauth_state,
    encode_oauth_state,
    sign_payload,
    verify_facebook_signature,
    verify_signature,
    verify_webhook_signature,
)

SECRET = 'whsec_test'
BODY = b'{"message":{"type":"status-update"}}'
PAYLOADS = [
    b'',
    '',
    BODY,
    BODY.decode(),
    'Caf\u00e9 \u2013 r\u00e9sum\u00e9 \U0001f511',
    b'\x00\xff\xfe binary',
    b'x' * 1_000_000,
]
SECRETS = [SECRET, 'k', b'\x01\x02bytes-secret', 's\u00e9cr\u00e8t', 'long' * 64]


def _append_x(value):
    return value + (b'x' if isinstance(value, bytes) else 'x')


class TestSignPayload:
    """Test HMAC generation"""

    def test_matches_hmac_sha256(self):
        expected = hmac.new(SECRET.encode(), BODY, hashlib.sha256).hexdigest()
        assert sign_payload(BODY, SECRET) == expected

    def test_str_and_bytes_agree(self):
        assert sign_payload(BODY.decode(), SECRET) == sign_payload(BODY, SECRET.encode())

    def test_rejects_non_string_payload(self):
        with pytest.raises(TypeError):
            sign_payload(None, SECRET)


class TestVerifySignature:
    """Test constant-time verification"""

    @pytest.mark.parametrize('secret', SECRETS)
    @pytest.mark.parametrize('payload', PAYLOADS)
    def test_valid(self, payload, secret):
        assert verify_signature(payload, sign_payload(payload, secret), secret) is True

    def test_uppercase_hex_is_accepted(self):
        assert verify_signature(BODY, sign_payload(BODY, SECRET).upper(), SECRET)

    @pytest.mark.parametrize('secret', SECRETS)
    @pytest.mark.parametrize('payload', PAYLOADS)
    def test_tampered_body(self, payload, secret):
        signature = sign_payload(payload, secret)
        assert verify_signature(_append_x(payload), signature, secret) is False

    @pytest.mark.parametrize('secret', SECRETS)
    @pytest.mark.parametrize('payload', PAYLOADS)
    def test_wrong_secret(self, payload, secret):
        assert verify_signature(payload, sign_payload(payload, secret), _append_x(secret)) is False
        assert verify_signature(payload, sign_payload(payload, 'other'), secret) is False

    @pytest.mark.parametrize('payload', [None, 123, object(), ['body']])
    def test_non_string_payload_fails_without_raising(self, payload):
        assert verify_signature(payload, 'ab' * 32, SECRET) is False

    @pytest.mark.parametrize('secret', [123, object(), ['s']])
    def test_non_string_secret_fails_without_raising(self, secret):
        assert verify_signature(BODY, 'ab' * 32, secret) is False

    @pytest.mark.parametrize('signature', [None, '', 'abc', 'zz' * 32, 12345, b'\xff\xfe', ['sig'], 'not-a-valid-hex-signature'])
    def test_malformed_signatures_fail_without_raising(self, signature):
        assert verify_signature(BODY, signature, SECRET) is False

    @pytest.mark.parametrize('secret', [None, '', b''])
    def test_missing_secret_fails(self, secret):
        assert verify_signature(BODY, sign_payload(BODY, 'x'), secret) is False


class TestWebhookPolicy:
    """Test the missing-secret policy"""

    def test_missing_secret_is_rejected_by_default(self):
        assert verify_webhook_signature(BODY, None, '') is False

    def test_missing_secret_with_unsigned_allowed(self, caplog):
        assert verify_webhook_signature(BODY, None, None, allow_unsigned=True, source='vapi') is True
        assert 'accepting unsigned request' in caplog.text

    def test_configured_secret_ignores_allow_unsigned(self):
        assert verify_webhook_signature(BODY, 'bad', SECRET, allow_unsigned=True) is False

    def test_valid_signature(self):
        assert verify_webhook_signature(BODY, sign_payload(BODY, SECRET), SECRET)

    def test_secret_never_logged(self, caplog):
        verify_webhook_signature(BODY, 'bad', SECRET)
        assert SECRET not in caplog.text


class TestFacebookSignature:
    """Test X-Hub-Signature-256 headers"""

    def test_valid_header(self):
        header = 'sha256=' + sign_payload(BODY, SECRET)
        assert verify_facebook_signature(BODY, header, SECRET)

    @pytest.mark.parametrize('header', [None, '', sign_payload(BODY, SECRET), 'sha1=abc', 'sha256='])
    def test_invalid_headers(self, header):
        assert verify_facebook_signature(BODY, header, SECRET) is False


class TestOAuthState:
    """Test signed state round-trips"""

    def test_round_trip(self):
        token = encode_oauth_state({'uid': 'user-1', 'returnUrl': '/portal/settings'}, SECRET, issued_at=1000)
        data = decode_oauth_state(token, SECRET)
        assert data == {'uid': 'user-1', 'returnUrl': '/portal/settings', 'iat': 1000}

    def test_wrong_secret(self):
        token = encode_oauth_state({'uid': 'user-1'}, SECRET)
        assert decode_oauth_state(token, 'other') is None

    def test_tampered_payload(self):
        token = encode_oauth_state({'uid': 'user-1'}, SECRET)
        forged = encode_oauth_state({'uid': 'attacker'}, 'other')
        payload = forged.split('.')[0]
        signature = token.split('.')[1]
        assert decode_oauth_state(f"{payload}.{signature}", SECRET) is None

    @pytest.mark.parametrize('token', [None, '', 'no-dot', 'a.b.c', '.', 12])
    def test_malformed(self, token):
        assert decode_oauth_state(token, SECRET) is None

    def test_signed_garbage_is_rejected(self):
        assert decode_oauth_state(f"!!!.{sign_payload('!!!', SECRET)}", SECRET) is None

    def test_expiry(self):
        token = encode_oauth_state({'uid': 'user-1'}, SECRET, issued_at=1000)
        assert decode_oauth_state(token, SECRET, max_age=600, now=1600) is not None
        assert decode_oauth_state(token, SECRET, max_age=600, now=1601) is None

    def test_encode_requires_secret(self):
        with pytest.raises(ValueError):
            encode_oauth_state({'uid': 'user-1'}, '')
