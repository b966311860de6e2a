"""OAuth 2.0 authorization code login with PKCE for the command line client.

The flow runs a one-shot HTTP server on the loopback interface:

1. ``/login`` redirects the browser to the provider's authorization page.
2. The provider redirects back to ``/post_login`` with the code.
3. The code is exchanged for tokens at the provider's token endpoint.
"""

import base64
import hashlib
import secrets
import time
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import TextIO
from urllib.parse import parse_qs, urlencode, urlsplit

import httpx

from timelapse.cli.config_store import ProviderCredentials
from timelapse.cli.errors import LoginError
from timelapse.config import ClientSettings
from timelapse.infrastructure.telemetry import get_logger

logger = get_logger(__name__)

LOGIN_PATH = "/login"
CALLBACK_PATH = "/post_login"


@dataclass
class OAuthClientConfig:
    """OAuth client registration used for login and refresh."""

    provider: str
    client_id: str
    authorization_url: str
    token_url: str
    client_secret: str = ""
    scopes: list[str] = field(default_factory=lambda: ["openid", "email"])

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "OAuthClientConfig":
        return cls(
            provider=settings.oauth_provider,
            client_id=settings.oauth_client_id,
            client_secret=settings.oauth_client_secret,
            authorization_url=settings.oauth_authorization_url,
            token_url=settings.oauth_token_url,
            scopes=settings.oauth_scope_list,
        )


def generate_code_verifier() -> str:
    return secrets.token_urlsafe(64)


def code_challenge(verifier: str) -> str:
    """S256 challenge: unpadded base64url of the verifier's SHA-256."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def build_authorization_url(
    config: OAuthClientConfig,
    redirect_uri: str,
    state: str,
    challenge: str,
) -> str:
    params = {
        "response_type": "code",
        "client_id": config.client_id,
        "redirect_uri": redirect_uri,
        "scope": " ".join(config.scopes),
        "state": state,
        "code_challenge": challenge,
        "code_challenge_method": "S256",
        "access_type": "offline",
        "prompt": "consent",
    }
    return f"{config.authorization_url}?{urlencode(params)}"


def _token_request(
    http_client: httpx.Client,
    config: OAuthClientConfig,
    data: dict[str, str],
) -> dict:
    data = {**data, "client_id": config.client_id}
    if config.client_secret:
        data["client_secret"] = config.client_secret

    try:
        response = http_client.post(
            config.token_url, data=data, headers={"Accept": "application/json"}
        )
    except httpx.HTTPError as exc:
        raise LoginError(f"Token request failed: {exc}") from exc

    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}
    if response.is_error or not body:
        description = body.get("error_description") or body.get("error")
        raise LoginError(
            f"Token request failed with status {response.status_code}: "
            f"{description or response.text}"
        )
    return body


def exchange_code(
    http_client: httpx.Client,
    config: OAuthClientConfig,
    code: str,
    verifier: str,
    redirect_uri: str,
) -> ProviderCredentials:
    """Exchange an authorization code for tokens.

    Raises:
        LoginError: If the provider rejects the code or returns no ID token
    """
    body = _token_request(
        http_client,
        config,
        {
            "grant_type": "authorization_code",
            "code": code,
            "code_verifier": verifier,
            "redirect_uri": redirect_uri,
        },
    )
    if not body.get("id_token"):
        raise LoginError("Token response contains no id_token")
    return ProviderCredentials(
        access_token=body.get("access_token", ""),
        refresh_token=body.get("refresh_token", ""),
        id_token=body["id_token"],
    )


def refresh_tokens(
    http_client: httpx.Client,
    config: OAuthClientConfig,
    credentials: ProviderCredentials,
) -> ProviderCredentials:
    """Use the refresh token; providers may omit a new refresh token, so the old one is kept."""
    body = _token_request(
        http_client,
        config,
        {"grant_type": "refresh_token", "refresh_token": credentials.refresh_token},
    )
    return ProviderCredentials(
        access_token=body.get("access_token", credentials.access_token),
        refresh_token=body.get("refresh_token") or credentials.refresh_token,
        id_token=body.get("id_token", credentials.id_token),
    )


class _LoginServer(HTTPServer):
    authorization_url: str = ""
    callback_params: dict[str, str] | None = None


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _LoginServer

    def do_GET(self) -> None:  # noqa: N802
        url = urlsplit(self.path)
        if url.path == LOGIN_PATH:
            self.send_response(302)
            self.send_header("Location", self.server.authorization_url)
            self.end_headers()
            return

        if url.path == CALLBACK_PATH:
            query = parse_qs(url.query)
            self.server.callback_params = {key: values[0] for key, values in query.items()}
            self._reply(200, "Login complete, you can close this window.")
            return

        self._reply(404, "Not found")

    def _reply(self, status: int, text: str) -> None:
        payload = text.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        logger.debug("Login callback request: " + format % args)


def run_login(
    config: OAuthClientConfig,
    http_client: httpx.Client,
    out: TextIO,
    open_browser: Callable[[str], bool] = webbrowser.open,
    timeout_seconds: float = 300,
) -> ProviderCredentials:
    """Run the interactive login and return the provider's tokens.

    Raises:
        LoginError: On provider errors, state mismatch or timeout
    """
    if not config.client_id:
        raise LoginError("No OAuth client id configured (set TIMELAPSE_OAUTH_CLIENT_ID)")

    server = _LoginServer(("127.0.0.1", 0), _CallbackHandler)
    server.timeout = 1
    host, port = server.server_address[:2]
    base = f"http://{host}:{port}"
    redirect_uri = f"{base}{CALLBACK_PATH}"

    state = secrets.token_urlsafe(16)
    verifier = generate_code_verifier()
    server.authorization_url = build_authorization_url(
        config, redirect_uri, state, code_challenge(verifier)
    )

    login_url = f"{base}{LOGIN_PATH}"
    print(f"Opening {login_url} in your browser to log in.", file=out)
    if not open_browser(login_url):
        print(f"Could not open a browser; visit {login_url} manually.", file=out)

    deadline = time.monotonic() + timeout_seconds
    try:
        while server.callback_params is None and time.monotonic() < deadline:
            server.handle_request()
    finally:
        server.server_close()

    params = server.callback_params
    if params is None:
        raise LoginError("Timed out waiting for the login callback")
    if "error" in params:
        raise LoginError(f"Login failed: {params.get('error_description') or params['error']}")
    if params.get("state") != state:
        raise LoginError("Login callback state does not match")
    if not params.get("code"):
        raise LoginError("Login callback carries no authorization code")

    logger.debug("Exchanging authorization code", extra={"provider": config.provider})
    return exchange_code(http_client, config, params["code"], verifier, redirect_uri)
