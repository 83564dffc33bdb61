import pytest

from authbridge.clients.cas import CasClient, CasProxyReceptor
from authbridge.clients.factory import build_clients
from authbridge.clients.http import (
    BasicAuthClient,
    DictUsernamePasswordAuthenticator,
    FormClient,
    SimpleTestUsernamePasswordAuthenticator,
)
from authbridge.clients.oauth import GitHubClient, TwitterClient
from authbridge.clients.registry import Clients
from authbridge.config.settings import OAuthCredentialsSetting
from authbridge.core.exceptions import ConfigurationError
from tests.conftest import MockWebContext, make_config


def make_form_client(**settings):
    return FormClient(
        authenticator=SimpleTestUsernamePasswordAuthenticator(),
        login_url="http://localhost/login-form",
        **settings,
    )


class TestClients:
    def test_assigns_callback_urls(self):
        form = make_form_client()
        github = GitHubClient(key="k", secret="s")
        clients = Clients("http://localhost/callback", [form, github])

        clients.ensure_initialized()

        assert form.callback_url == "http://localhost/callback?client_name=FormClient"
        assert github.callback_url == "http://localhost/callback?client_name=GitHubClient"

    def test_keeps_explicit_callback_url(self):
        form = make_form_client(callback_url="http://elsewhere/form-callback")
        Clients("http://localhost/callback", [form]).ensure_initialized()
        assert form.callback_url == "http://elsewhere/form-callback"

    def test_appends_to_existing_query(self):
        form = make_form_client()
        clients = Clients("http://localhost/callback?tenant=a", [form], client_name_parameter="cn")
        clients.ensure_initialized()
        assert form.callback_url == "http://localhost/callback?tenant=a&cn=FormClient"

    def test_find_client(self):
        form = make_form_client()
        clients = Clients("http://localhost/callback", [form, make_form_client(name="OtherForm")])

        assert clients.find_client(MockWebContext({"client_name": "FormClient"})) is form
        assert clients.find_client_by_name("OtherForm").name == "OtherForm"

    def test_unknown_client(self):
        clients = Clients("http://localhost/callback", [make_form_client()])
        with pytest.raises(ConfigurationError, match="No client found"):
            clients.find_client_by_name("Nope")

    def test_missing_client_name_parameter(self):
        clients = Clients("http://localhost/callback", [make_form_client()])
        with pytest.raises(ConfigurationError, match="client_name"):
            clients.find_client(MockWebContext())

    def test_duplicate_names_rejected(self):
        clients = Clients("http://localhost/callback", [make_form_client(), make_form_client()])
        with pytest.raises(ConfigurationError, match="Duplicate client name"):
            clients.ensure_initialized()

    def test_blank_callback_url(self):
        with pytest.raises(ConfigurationError, match="callback_url"):
            Clients("", [make_form_client()]).ensure_initialized()

    def test_relative_callback_url(self):
        with pytest.raises(ConfigurationError, match="callback_url must be an absolute"):
            Clients("/callback", [make_form_client()]).ensure_initialized()

    def test_shutdown_stops_receptor_cleaner(self):
        receptor = CasProxyReceptor(millis_between_cleanups=50)
        clients = Clients("http://localhost/callback", [receptor])
        clients.ensure_initialized()
        receptor.ensure_initialized()
        assert receptor.cleaner_running

        clients.shutdown()

        assert not receptor.cleaner_running


class TestBuildClients:
    def test_demo_defaults(self):
        clients = build_clients(make_config())

        names = [client.name for client in clients]
        assert names == ["FormClient", "BasicAuthClient"]
        assert isinstance(clients.get("FormClient").authenticator, SimpleTestUsernamePasswordAuthenticator)

    def test_static_users(self):
        clients = build_clients(make_config(demo_mode=False, form_users={"alice": "pw"}))
        assert isinstance(clients.get("BasicAuthClient").authenticator, DictUsernamePasswordAuthenticator)

    def test_no_users_outside_demo_disables_password_clients(self):
        clients = build_clients(make_config(demo_mode=False))
        assert len(clients) == 0

    def test_oauth_providers(self):
        cfg = make_config(
            oauth_providers={
                "github": OAuthCredentialsSetting("gk", "gs"),
                "twitter": OAuthCredentialsSetting("tk", "ts"),
            },
            oauth_connect_timeout_ms=0,
            oauth_proxy_host="proxy",
        )

        clients = build_clients(cfg)

        github = clients.get("GitHubClient")
        assert isinstance(github, GitHubClient)
        assert github.config.key == "gk"
        assert github.config.connect_timeout == 0
        assert github.config.proxy_host == "proxy"
        assert isinstance(clients.get("TwitterClient"), TwitterClient)

    def test_cas_with_proxy_receptor(self):
        cfg = make_config(
            form_login_url="",
            cas_login_url="https://cas.example.org/cas/login",
            cas_proxy_enabled=True,
            cas_proxy_millis_between_cleanups=0,
        )

        clients = build_clients(cfg)
        clients.ensure_initialized()

        cas_client = clients.get("CasClient")
        receptor = clients.get("CasProxyReceptor")
        assert isinstance(cas_client, CasClient)
        assert cas_client.proxy_receptor is receptor
        assert receptor.callback_url == "http://localhost/callback?client_name=CasProxyReceptor"
        assert clients.get("FormClient") is None
        assert isinstance(clients.get("BasicAuthClient"), BasicAuthClient)
