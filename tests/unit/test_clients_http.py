import base64

import pytest

from authbridge.clients.http import (
    BasicAuthClient,
    DictUsernamePasswordAuthenticator,
    FormClient,
    HttpProfile,
    SimpleTestUsernamePasswordAuthenticator,
)
from authbridge.core.credentials import UsernamePasswordCredentials
from authbridge.core.exceptions import AuthChallengeError, ConfigurationError, CredentialsError
from tests.conftest import MockWebContext

CALLBACK_URL = "http://localhost/callback?client_name=FormClient"


def basic_header(raw: str) -> dict[str, str]:
    return {"Authorization": "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")}


@pytest.fixture()
def form_client():
    return FormClient(
        authenticator=SimpleTestUsernamePasswordAuthenticator(),
        login_url="http://localhost/login-form",
        callback_url=CALLBACK_URL,
    )


@pytest.fixture()
def basic_client():
    return BasicAuthClient(
        authenticator=DictUsernamePasswordAuthenticator({"alice": "s3cret:with:colons"}),
        callback_url="http://localhost/callback?client_name=BasicAuthClient",
    )


class TestFormClient:
    def test_redirects_to_login_page(self, form_client):
        assert form_client.redirection_target(MockWebContext()) == "http://localhost/login-form"

    def test_reads_credentials(self, form_client):
        context = MockWebContext({"username": "alice", "password": "alice"})

        credentials = form_client.extract_credentials(context)

        assert credentials == UsernamePasswordCredentials("alice", "alice", client_name="FormClient")
        assert "password=" not in repr(credentials)

    def test_custom_parameter_names(self):
        client = FormClient(
            authenticator=SimpleTestUsernamePasswordAuthenticator(),
            login_url="http://localhost/login-form",
            callback_url=CALLBACK_URL,
            username_parameter="login",
            password_parameter="pwd",
        )
        credentials = client.extract_credentials(MockWebContext({"login": "bob", "pwd": "bob"}))
        assert credentials.username == "bob"

    @pytest.mark.parametrize(
        "params",
        [{}, {"username": "alice"}, {"password": "alice"}, {"username": " ", "password": "alice"}],
    )
    def test_blank_credentials(self, form_client, params):
        with pytest.raises(CredentialsError, match="Username and password cannot be blank"):
            form_client.extract_credentials(MockWebContext(params))

    def test_resolves_profile(self, form_client):
        profile = form_client.resolve_profile(UsernamePasswordCredentials("alice", "alice"))

        assert isinstance(profile, HttpProfile)
        assert profile.typed_id == "HttpProfile#alice"
        assert profile.username == "alice"

    def test_wrong_password(self, form_client):
        with pytest.raises(CredentialsError):
            form_client.resolve_profile(UsernamePasswordCredentials("alice", "bob"))

    def test_missing_login_url(self):
        client = FormClient(authenticator=SimpleTestUsernamePasswordAuthenticator(), callback_url=CALLBACK_URL)
        with pytest.raises(ConfigurationError, match="login_url cannot be blank"):
            client.redirection_target(MockWebContext())

    def test_relative_login_url_is_rejected(self):
        client = FormClient(
            authenticator=SimpleTestUsernamePasswordAuthenticator(),
            login_url="/login-form",
            callback_url=CALLBACK_URL,
        )
        with pytest.raises(ConfigurationError, match=r"login_url must be an absolute http\(s\) URL"):
            client.redirection_target(MockWebContext())

    def test_missing_authenticator(self):
        client = FormClient(login_url="http://localhost/login-form", callback_url=CALLBACK_URL)
        with pytest.raises(ConfigurationError, match="authenticator"):
            client.redirection_target(MockWebContext())

    def test_configure_after_init_is_rejected(self, form_client):
        form_client.redirection_target(MockWebContext())
        with pytest.raises(ConfigurationError, match="already initialized"):
            form_client.configure(login_url="http://elsewhere/login")

    def test_clone_is_uninitialized_copy(self, form_client):
        form_client.redirection_target(MockWebContext())

        other = form_client.clone(name="OtherForm")

        assert not other.initialized
        assert other.name == "OtherForm"
        assert other.config.login_url == form_client.config.login_url
        assert other.authenticator is form_client.authenticator


class TestBasicAuthClient:
    def test_redirects_to_callback(self, basic_client):
        assert basic_client.redirection_target(MockWebContext()) == basic_client.callback_url

    def test_missing_header_challenges(self, basic_client):
        with pytest.raises(AuthChallengeError) as excinfo:
            basic_client.extract_credentials(MockWebContext())
        assert excinfo.value.realm_name == "authentication required"
        assert excinfo.value.www_authenticate == 'Basic realm="authentication required"'

    def test_other_scheme_challenges(self, basic_client):
        with pytest.raises(AuthChallengeError):
            basic_client.extract_credentials(MockWebContext(headers={"Authorization": "Bearer abc"}))

    def test_password_keeps_colons(self, basic_client):
        context = MockWebContext(headers=basic_header("alice:s3cret:with:colons"))

        credentials = basic_client.extract_credentials(context)

        assert credentials.username == "alice"
        assert credentials.password == "s3cret:with:colons"
        assert basic_client.resolve_profile(credentials).id == "alice"

    @pytest.mark.parametrize(
        "header",
        [
            {"Authorization": "Basic !!!not-base64!!!"},
            basic_header("no-colon-here"),
        ],
    )
    def test_malformed_header(self, basic_client, header):
        with pytest.raises(CredentialsError, match="Bad format of the basic auth header"):
            basic_client.extract_credentials(MockWebContext(headers=header))

    def test_unknown_user(self, basic_client):
        with pytest.raises(CredentialsError, match="Invalid username or password"):
            basic_client.resolve_profile(UsernamePasswordCredentials("mallory", "x"))
