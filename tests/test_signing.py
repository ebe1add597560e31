"""
Test suite for Plaza request signing functionality

This module tests canonical string construction, HMAC signing, signing
configuration and the requests integration.
"""

import base64
import hashlib
import threading
from unittest.mock import Mock

import pytest

from plaza_sdk.signing import (
    # Core signing
    PlazaSigner,
    create_signer,
    prepare_request,
    # Types
    Credential,
    RequestDescriptor,
    SigningConfig,
    SigningError,
    SigningErrorCodes,
    DigestAlgorithm,
    HttpMethod,
    # Canonical string
    build_canonical_string,
    split_canonical_string,
    # Configuration
    create_signing_config,
    create_from_profile,
    get_signing_profile,
    list_signing_profiles,
    SIGNING_PROFILES,
    # Utilities
    format_http_date,
    validate_http_date,
    calculate_content_md5,
    compute_hmac,
    parse_url,
    target_path_from_url,
    # HTTP Integration
    SigningSession,
    create_signing_session,
)
from plaza_sdk.signing.canonical_string import CanonicalStringBuilder, CANONICAL_FIELDS
from plaza_sdk.exceptions import ConfigurationError


GOLDEN_DATE = "Tue, 01 Jan 2019 00:00:00 GMT"
GOLDEN_TIMESTAMP = 1546300800
GOLDEN_PATH = "/services/rest/orders/v1/open/"
GOLDEN_CANONICAL = "GET\n\n\nTue, 01 Jan 2019 00:00:00 GMT\n/services/rest/orders/v1/open/"
GOLDEN_SHA256_SIGNATURE = "XNdeWaL/nchyOyj9tpRxRZqi4/wxP+W4yYMl4x54R3A="
GOLDEN_SHA1_SIGNATURE = "2q5uwMPc2M3R06hXHQG9FlklmQw="


@pytest.fixture
def credential():
    return Credential(public_key="abc", private_key="secret")


@pytest.fixture
def fixed_clock_signer():
    return PlazaSigner(SigningConfig(clock=lambda: GOLDEN_TIMESTAMP))


class TestSigningUtilities:
    """Test utility functions"""

    def test_format_http_date(self):
        """Test HTTP-date formatting"""
        assert format_http_date(GOLDEN_TIMESTAMP) == GOLDEN_DATE
        assert format_http_date(GOLDEN_TIMESTAMP + 0.9) == GOLDEN_DATE  # second precision
        assert validate_http_date(format_http_date())

    def test_validate_http_date(self):
        """Test HTTP-date validation"""
        assert validate_http_date(GOLDEN_DATE)

        assert not validate_http_date("2019-01-01T00:00:00Z")
        assert not validate_http_date("Tue, 01 Jan 2019 00:00:00 +0100")
        assert not validate_http_date("")
        assert not validate_http_date(None)

    def test_calculate_content_md5(self):
        """Test Content-MD5 calculation"""
        assert calculate_content_md5(None) == ""
        assert calculate_content_md5(b"") == ""
        assert calculate_content_md5("") == ""

        expected = base64.b64encode(hashlib.md5(b"<a/>").digest()).decode('ascii')
        assert calculate_content_md5(b"<a/>") == expected
        assert calculate_content_md5("<a/>") == expected
        assert expected == "8BnumgOXiv+fm3jQ3fPttw=="

    def test_compute_hmac(self):
        """Test keyed digest against known values"""
        sha256 = compute_hmac("secret", GOLDEN_CANONICAL, DigestAlgorithm.SHA256)
        assert base64.b64encode(sha256).decode('ascii') == GOLDEN_SHA256_SIGNATURE
        assert len(sha256) == 32

        sha1 = compute_hmac("secret", GOLDEN_CANONICAL, DigestAlgorithm.SHA1)
        assert base64.b64encode(sha1).decode('ascii') == GOLDEN_SHA1_SIGNATURE
        assert len(sha1) == 20

    def test_compute_hmac_unsupported_digest(self):
        with pytest.raises(SigningError) as exc_info:
            compute_hmac("secret", "message", "md5")
        assert exc_info.value.code == SigningErrorCodes.UNSUPPORTED_DIGEST

    def test_parse_url(self):
        """Test URL parsing"""
        parsed = parse_url("https://plazaapi.bol.com/offers/v1/export?filter=PUBLISHED")

        assert parsed["origin"] == "https://plazaapi.bol.com"
        assert parsed["pathname"] == "/offers/v1/export"
        assert parsed["search"] == "?filter=PUBLISHED"
        assert parsed["target_path"] == "/offers/v1/export?filter=PUBLISHED"

        assert target_path_from_url("https://plazaapi.bol.com") == "/"
        assert target_path_from_url("https://plazaapi.bol.com/offers/v1/abc;1?x=1") == "/offers/v1/abc;1?x=1"

        with pytest.raises(SigningError):
            parse_url("not-a-url")

        with pytest.raises(SigningError):
            parse_url("ftp://plazaapi.bol.com/file")


class TestCredential:
    """Test credential validation"""

    def test_valid_credential(self, credential):
        assert credential.public_key == "abc"
        assert credential.private_key == "secret"

    def test_private_key_not_in_repr(self, credential):
        assert "secret" not in repr(credential)

    def test_empty_public_key(self):
        with pytest.raises(ConfigurationError):
            Credential(public_key="", private_key="secret")

    def test_empty_private_key(self):
        with pytest.raises(ConfigurationError):
            Credential(public_key="abc", private_key="")

    def test_credential_is_immutable(self, credential):
        with pytest.raises(AttributeError):
            credential.private_key = "other"


class TestRequestDescriptor:
    """Test request descriptor validation"""

    def test_method_coercion(self):
        descriptor = RequestDescriptor(method="post", path="/x")
        assert descriptor.method is HttpMethod.POST

    def test_unknown_method_fails_fast(self):
        with pytest.raises(ValueError):
            RequestDescriptor(method="PATCH", path="/x")

    def test_path_must_be_absolute(self):
        with pytest.raises(ValueError):
            RequestDescriptor(method=HttpMethod.GET, path="services/rest")

        with pytest.raises(ValueError):
            RequestDescriptor(method=HttpMethod.GET, path="")

    @pytest.mark.parametrize("field,value", [
        ("path", "/offers/v1/1\nX-Injected: 1"),
        ("path", "/offers/v1/1\r"),
        ("content_type", "application/xml\nTue, 01 Jan 2019 00:00:00 GMT"),
        ("content_type", "application/xml\r\n"),
    ])
    def test_line_breaks_rejected(self, field, value):
        kwargs = {"method": HttpMethod.POST, "path": "/offers/v1/1", field: value}
        with pytest.raises(ValueError, match="line breaks"):
            RequestDescriptor(**kwargs)

    def test_none_content_type_is_empty(self):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path="/x", content_type=None)
        assert descriptor.content_type == ""


class TestCanonicalString:
    """Test canonical string construction"""

    def test_golden_canonical_string(self):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH)
        assert build_canonical_string(descriptor, GOLDEN_DATE) == GOLDEN_CANONICAL

    def test_bodiless_get_has_four_separators(self):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH)
        canonical = build_canonical_string(descriptor, GOLDEN_DATE)
        assert canonical.count("\n") == 4

    def test_field_order(self):
        descriptor = RequestDescriptor(
            method=HttpMethod.POST,
            path="/services/rest/orders/v1/process/",
            content_type="application/xml",
            body=b"<a/>",
        )
        fields = split_canonical_string(build_canonical_string(descriptor, GOLDEN_DATE))

        assert fields == {
            'method': 'POST',
            'content_md5': '8BnumgOXiv+fm3jQ3fPttw==',
            'content_type': 'application/xml',
            'date': GOLDEN_DATE,
            'path': '/services/rest/orders/v1/process/',
        }

    def test_query_string_is_part_of_path(self):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path="/offers/v1/export?filter=PUBLISHED")
        canonical = build_canonical_string(descriptor, GOLDEN_DATE)
        assert canonical.endswith("\n/offers/v1/export?filter=PUBLISHED")

    def test_invalid_date_rejected(self):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH)
        with pytest.raises(SigningError) as exc_info:
            build_canonical_string(descriptor, "yesterday")
        assert exc_info.value.code == SigningErrorCodes.INVALID_DATE

    def test_builder_fields(self):
        descriptor = RequestDescriptor(method=HttpMethod.DELETE, path="/offers/v1/7")
        fields = CanonicalStringBuilder(descriptor, GOLDEN_DATE).fields()

        assert len(fields) == len(CANONICAL_FIELDS)
        assert fields == ["DELETE", "", "", GOLDEN_DATE, "/offers/v1/7"]

    def test_split_rejects_wrong_field_count(self):
        with pytest.raises(ValueError):
            split_canonical_string("GET\n/path")


class TestSigningConfiguration:
    """Test signing configuration and builders"""

    def test_default_config(self):
        config = SigningConfig()
        assert config.digest_algorithm == DigestAlgorithm.SHA256
        assert config.scheme == "BOL"
        assert callable(config.clock)

    def test_builder(self):
        clock = Mock(return_value=GOLDEN_TIMESTAMP)
        config = (create_signing_config()
                  .digest_algorithm(DigestAlgorithm.SHA1)
                  .scheme("PLAZA")
                  .clock(clock)
                  .build())

        assert config.digest_algorithm == DigestAlgorithm.SHA1
        assert config.scheme == "PLAZA"
        assert config.clock is clock

    def test_builder_rejects_unsupported_digest(self):
        with pytest.raises(SigningError) as exc_info:
            create_signing_config().digest_algorithm("md5")
        assert exc_info.value.code == SigningErrorCodes.UNSUPPORTED_DIGEST

    def test_error_codes(self):
        codes = {name for name in vars(SigningErrorCodes) if name.isupper()}
        assert codes == {"INVALID_CONFIG", "UNSUPPORTED_DIGEST", "INVALID_URL", "INVALID_DATE"}

    def test_builder_accepts_digest_name(self):
        assert create_signing_config().digest_algorithm("sha1").build().digest_algorithm == DigestAlgorithm.SHA1

    def test_builder_rejects_scheme_with_space(self):
        with pytest.raises(SigningError) as exc_info:
            create_signing_config().scheme("BOL X").build()
        assert exc_info.value.code == SigningErrorCodes.INVALID_CONFIG

    def test_profiles(self):
        assert set(SIGNING_PROFILES) == {'standard', 'legacy'}
        assert create_from_profile('standard').digest_algorithm == DigestAlgorithm.SHA256
        assert create_from_profile('legacy').digest_algorithm == DigestAlgorithm.SHA1

    def test_unknown_profile(self):
        with pytest.raises(SigningError):
            create_from_profile('nonexistent')

    def test_profile_lookup(self):
        assert list_signing_profiles() == list(SIGNING_PROFILES)
        assert get_signing_profile("legacy").digest_algorithm == DigestAlgorithm.SHA1

        with pytest.raises(SigningError) as exc_info:
            get_signing_profile("nonexistent")
        assert "standard" in exc_info.value.details["available_profiles"]

    def test_signer_rejects_invalid_config(self):
        with pytest.raises(SigningError):
            PlazaSigner(SigningConfig(scheme=""))


class TestPlazaSigner:
    """Test request signing"""

    def test_golden_example(self, credential):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date=GOLDEN_DATE)
        signed = PlazaSigner().prepare(descriptor, credential)

        assert signed.canonical_string == GOLDEN_CANONICAL
        assert signed.signature == GOLDEN_SHA256_SIGNATURE
        assert signed.headers['Authorization'] == f"BOL abc:{GOLDEN_SHA256_SIGNATURE}"
        assert signed.authorization == signed.headers['Authorization']

    def test_golden_example_sha1(self, credential):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date=GOLDEN_DATE)
        signed = create_signer(create_from_profile('legacy')).prepare(descriptor, credential)
        assert signed.headers['Authorization'] == f"BOL abc:{GOLDEN_SHA1_SIGNATURE}"

    def test_clock_supplies_date(self, credential, fixed_clock_signer):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH)
        signed = fixed_clock_signer.prepare(descriptor, credential)

        assert signed.date == GOLDEN_DATE
        assert signed.headers['Date'] == GOLDEN_DATE
        assert signed.signature == GOLDEN_SHA256_SIGNATURE

    def test_date_header_matches_signed_date(self, credential):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH)
        signed = PlazaSigner().prepare(descriptor, credential)

        assert signed.headers['Date'] == signed.date
        assert signed.canonical_string.split("\n")[3] == signed.date

    def test_clock_read_on_every_call(self, credential):
        clock = Mock(side_effect=[GOLDEN_TIMESTAMP, GOLDEN_TIMESTAMP + 1])
        signer = PlazaSigner(SigningConfig(clock=clock))
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH)

        first = signer.prepare(descriptor, credential)
        second = signer.prepare(descriptor, credential)

        assert clock.call_count == 2
        assert first.date != second.date
        assert first.signature != second.signature

    def test_determinism(self, credential, fixed_clock_signer):
        descriptor = RequestDescriptor(
            method=HttpMethod.POST,
            path="/offers/v1/123",
            content_type="application/xml",
            body="<OfferCreate/>",
        )
        results = [fixed_clock_signer.prepare(descriptor, credential) for _ in range(5)]

        assert len({r.canonical_string for r in results}) == 1
        assert len({r.signature for r in results}) == 1

    def test_date_changes_signature(self, credential):
        signer = PlazaSigner()
        first = signer.prepare(
            RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date=GOLDEN_DATE), credential
        )
        second = signer.prepare(
            RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date="Tue, 01 Jan 2019 00:00:01 GMT"),
            credential
        )
        assert first.signature != second.signature

    def test_path_changes_signature(self, credential):
        signer = PlazaSigner()
        first = signer.prepare(
            RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date=GOLDEN_DATE), credential
        )
        second = signer.prepare(
            RequestDescriptor(method=HttpMethod.GET, path="/services/rest/orders/v1/process/", date=GOLDEN_DATE),
            credential
        )
        assert first.signature != second.signature

    def test_private_key_changes_signature(self, credential):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date=GOLDEN_DATE)
        other = Credential(public_key="abc", private_key="other-secret")

        assert (PlazaSigner().prepare(descriptor, credential).signature !=
                PlazaSigner().prepare(descriptor, other).signature)

    def test_bodiless_headers(self, credential):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date=GOLDEN_DATE)
        signed = PlazaSigner().prepare(descriptor, credential)
        assert set(signed.headers) == {'Date', 'Authorization'}

    def test_body_headers(self, credential):
        descriptor = RequestDescriptor(
            method=HttpMethod.POST,
            path="/services/rest/orders/v1/process/",
            content_type="application/xml",
            date=GOLDEN_DATE,
            body=b"<a/>",
        )
        signed = PlazaSigner().prepare(descriptor, credential)

        assert signed.headers['Content-Type'] == "application/xml"
        assert signed.headers['Content-MD5'] == "8BnumgOXiv+fm3jQ3fPttw=="
        assert signed.headers['Date'] == GOLDEN_DATE
        assert signed.headers['Authorization'].startswith("BOL abc:")

    def test_custom_scheme(self, credential):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date=GOLDEN_DATE)
        signed = PlazaSigner(SigningConfig(scheme="PLAZA")).prepare(descriptor, credential)
        assert signed.headers['Authorization'] == f"PLAZA abc:{GOLDEN_SHA256_SIGNATURE}"

    def test_printable_canonical_string(self, credential):
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date=GOLDEN_DATE)
        signed = prepare_request(descriptor, credential)
        assert "\n" not in signed.printable_canonical_string()
        assert signed.printable_canonical_string().startswith("GET\\n\\n\\n")

    def test_concurrent_signing(self, credential):
        """Each thread gets its own date and signature from a shared signer"""
        timestamps = iter(range(GOLDEN_TIMESTAMP, GOLDEN_TIMESTAMP + 20))
        lock = threading.Lock()

        def clock():
            with lock:
                return next(timestamps)

        signer = PlazaSigner(SigningConfig(clock=clock))
        descriptor = RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH)
        results = []

        def worker():
            signed = signer.prepare(descriptor, credential)
            with lock:
                results.append(signed)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({r.date for r in results}) == 20
        for signed in results:
            assert signed.headers['Date'] == signed.date
            expected = prepare_request(
                RequestDescriptor(method=HttpMethod.GET, path=GOLDEN_PATH, date=signed.date),
                credential
            )
            assert signed.signature == expected.signature


class TestSigningSession:
    """Test requests integration"""

    def test_send_attaches_signed_headers(self, credential, recording_session, adapter):
        signing_session = SigningSession(
            credential,
            SigningConfig(clock=lambda: GOLDEN_TIMESTAMP),
            session=recording_session,
        )
        response, signed = signing_session.send(
            'GET', "https://plazaapi.bol.com/services/rest/orders/v1/open/"
        )

        assert response.status_code == 200
        assert signed.canonical_string == GOLDEN_CANONICAL

        prepared = adapter.last
        assert prepared.method == 'GET'
        assert prepared.url == "https://plazaapi.bol.com/services/rest/orders/v1/open/"
        assert prepared.headers['Date'] == GOLDEN_DATE
        assert prepared.headers['Authorization'] == f"BOL abc:{GOLDEN_SHA256_SIGNATURE}"
        assert prepared.body is None

    def test_request_signs_data_and_content_type(self, credential, recording_session, adapter,
                                                 server_authorization):
        signing_session = SigningSession(credential, session=recording_session)

        signing_session.post(
            "https://plazaapi.bol.com/offers/v1/42",
            data="<OfferCreate/>",
            headers={'content-type': 'application/xml', 'X-Extra': '1'},
        )

        prepared = adapter.last
        assert prepared.headers['Content-Type'] == 'application/xml'
        assert [name for name in prepared.headers if name.lower() == 'content-type'] == ['Content-Type']
        assert prepared.headers['X-Extra'] == '1'
        assert prepared.headers['Content-MD5'] == calculate_content_md5("<OfferCreate/>")
        assert prepared.body == b"<OfferCreate/>"
        assert prepared.headers['Authorization'] == server_authorization(prepared)

    @pytest.mark.parametrize("url,wire_path", [
        ("https://plazaapi.bol.com/offers/v1/export?filter=PUBLISHED", "/offers/v1/export?filter=PUBLISHED"),
        ("https://plazaapi.bol.com/offers/v1/abc;1", "/offers/v1/abc;1"),
        ("https://plazaapi.bol.com/offers/v1/export/offers.csv;jsessionid=F00D",
         "/offers/v1/export/offers.csv;jsessionid=F00D"),
        ("https://plazaapi.bol.com/offers/v1/abc def", "/offers/v1/abc%20def"),
        ("https://plazaapi.bol.com/offers/v1/café", "/offers/v1/caf%C3%A9"),
    ])
    def test_signed_path_matches_wire_path(self, credential, recording_session, adapter,
                                           server_authorization, url, wire_path):
        signing_session = SigningSession(credential, session=recording_session)

        _, signed = signing_session.send('GET', url)

        prepared = adapter.last
        assert prepared.path_url == wire_path
        assert split_canonical_string(signed.canonical_string)['path'] == wire_path
        assert prepared.headers['Authorization'] == server_authorization(prepared)

    def test_params_are_signed(self, credential, recording_session, adapter, server_authorization):
        signing_session = SigningSession(credential, session=recording_session)

        _, signed = signing_session.send(
            'GET', "https://plazaapi.bol.com/offers/v1/export", params={'filter': 'PUBLISHED'}
        )

        assert signed.canonical_string.endswith("\n/offers/v1/export?filter=PUBLISHED")
        assert adapter.last.headers['Authorization'] == server_authorization(adapter.last)

    def test_sign_matches_send(self, credential, recording_session):
        signing_session = SigningSession(
            credential, SigningConfig(clock=lambda: GOLDEN_TIMESTAMP), session=recording_session
        )
        url = "https://plazaapi.bol.com/offers/v1/abc;1"

        signed = signing_session.sign('GET', url)
        _, sent = signing_session.send('GET', url)

        assert signed.canonical_string == sent.canonical_string

    def test_sha1_signature_matches_wire(self, credential, recording_session, adapter,
                                         server_authorization):
        signing_session = SigningSession(
            credential, create_from_profile('legacy'), session=recording_session
        )
        signing_session.put("https://plazaapi.bol.com/offers/v1/1", data=b"<a/>",
                            headers={'Content-Type': 'application/xml'})

        prepared = adapter.last
        assert prepared.headers['Authorization'] == server_authorization(prepared, digest=hashlib.sha1)

    @pytest.mark.parametrize("argument", [
        {'json': {'a': 1}},
        {'files': {'file': b"data"}},
        {'auth': ('user', 'password')},
    ])
    def test_unsignable_arguments_rejected(self, credential, recording_session, adapter, argument):
        signing_session = SigningSession(credential, session=recording_session)

        with pytest.raises(ValueError, match="data"):
            signing_session.request('POST', "https://plazaapi.bol.com/offers/v1/1", **argument)
        assert adapter.requests == []

    def test_unknown_argument_rejected(self, credential, recording_session, adapter):
        signing_session = SigningSession(credential, session=recording_session)

        with pytest.raises(TypeError):
            signing_session.get("https://plazaapi.bol.com/offers/v1/1", hooks_extra=True)
        assert adapter.requests == []

    def test_unknown_method_rejected(self, credential, recording_session):
        signing_session = SigningSession(credential, session=recording_session)

        with pytest.raises(ValueError):
            signing_session.request('PATCH', "https://plazaapi.bol.com/offers/v1/1")

    def test_invalid_url_rejected(self, credential, recording_session):
        signing_session = SigningSession(credential, session=recording_session)

        with pytest.raises(SigningError):
            signing_session.get("ftp://plazaapi.bol.com/file")

    def test_timeout_passed_to_transport(self, credential, recording_session, adapter):
        SigningSession(credential, session=recording_session).get(
            "https://plazaapi.bol.com/services/rest/orders/v1/open/", timeout=5
        )
        assert adapter.send_kwargs[-1]['timeout'] == 5

    def test_canonical_string_logged_only_when_enabled(self, credential, recording_session, caplog):
        url = "https://plazaapi.bol.com/services/rest/orders/v1/open/"

        with caplog.at_level("DEBUG", logger="plaza_sdk.signing.integration"):
            SigningSession(credential, session=recording_session).get(url)
        assert "Canonical string" not in caplog.text

        caplog.clear()
        with caplog.at_level("DEBUG", logger="plaza_sdk.signing.integration"):
            SigningSession(credential, session=recording_session, log_canonical_strings=True).get(url)
        assert "Canonical string" in caplog.text
        assert "secret" not in caplog.text

    def test_context_manager_closes_session(self, credential, recording_session, adapter):
        with SigningSession(credential, session=recording_session):
            pass
        assert adapter.closed

    def test_create_signing_session(self, credential):
        signing_session = create_signing_session(credential, verify=False)

        assert signing_session.session.verify is False
        assert signing_session.signer.config.digest_algorithm == DigestAlgorithm.SHA256
        signing_session.close()
