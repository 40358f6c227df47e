# src/hubspot_oauth_quickstart/main.py

import html
import typing
import webbrowser
from contextlib import asynccontextmanager
from urllib.parse import quote

import httpx
from fastapi import FastAPI, APIRouter, Depends, Request, HTTPException, status, Response
from fastapi.responses import HTMLResponse, RedirectResponse

from .config import Settings, settings
from .environment import EnvironmentSelector, ConfigurationError
from .hubspot_api import HubSpotApiClient, Contact
from .oauth_client import OAuthExchangeClient, build_authorization_code_proof
from .results import Ok, Err, Result
from .sessions import SessionMiddlewareCustom, get_session_id
from .token_accessor import SessionTokenAccessor
from .token_store import InMemoryTokenStore, TokenStore

router = APIRouter()


# --- Dependencies ---
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_selector(request: Request) -> EnvironmentSelector:
    return request.app.state.selector


def get_exchange_client(request: Request) -> OAuthExchangeClient:
    return request.app.state.exchange_client


def get_token_accessor(request: Request) -> SessionTokenAccessor:
    return request.app.state.token_accessor


def get_api_client(request: Request) -> HubSpotApiClient:
    return request.app.state.api_client


#================================#
#   Running the OAuth 2.0 Flow   #
#================================#

# Step 1
# Redirect the user from the installation page to the authorization URL
@router.get("/install")
async def install(selector: EnvironmentSelector = Depends(get_selector)):
    auth_url = selector.current.urls.authorize_url
    print("")
    print("MAIN: === Initiating OAuth 2.0 flow with HubSpot ===")
    print("")
    print("MAIN: ===> Step 1: Redirecting user to your app's OAuth URL")
    print(f"MAIN: {auth_url}")
    print("MAIN: ===> Step 2: User is being prompted for consent by HubSpot")
    return RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)


# Step 2
# The user is prompted to give the app access to the requested resources.
# This is all done by HubSpot, so no work is necessary on the app's end.

# Step 3
# Receive the authorization code from the OAuth 2.0 server
@router.get("/oauth-callback")
async def oauth_callback(
        request: Request,
        session_id: str = Depends(get_session_id),
        selector: EnvironmentSelector = Depends(get_selector),
        exchange_client: OAuthExchangeClient = Depends(get_exchange_client),
):
    print("MAIN: ===> Step 3: Handling the request sent by the server")
    code = request.query_params.get("code")
    if not code:
        error = request.query_params.get("error")
        print(f"MAIN:        > No authorization code in callback. Error: {error}")
        message = "Missing authorization code."
        if error:
            message += f" HubSpot error: {html.escape(error)}"
        return HTMLResponse(f"<h4>{message}</h4>", status_code=status.HTTP_400_BAD_REQUEST)

    print("MAIN:        > Received an authorization token")
    snapshot = selector.current
    proof = build_authorization_code_proof(snapshot, code)

    # Step 4
    # Exchange the authorization code for an access token and refresh token
    print("MAIN: ===> Step 4: Exchanging authorization code for an access token and refresh token")
    result = await exchange_client.exchange(session_id, proof, snapshot)
    if isinstance(result, Err):
        print(f"MAIN:        > Exchange failed for HubSpot env {snapshot.env.value}: {result.message}")
        return RedirectResponse(url=f"/error?msg={quote(result.message)}", status_code=status.HTTP_302_FOUND)

    return RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)


#========================================#
#   Displaying information to the user   #
#========================================#

def render_contact(result: Result[Contact]) -> str:
    if isinstance(result, Err):
        return f"<p>Unable to retrieve contact! Error Message: {result.message}</p>"
    return f"<p>Contact name: {result.value.full_name}</p>"


@router.get("/", response_class=HTMLResponse)
async def read_root(
        session_id: str = Depends(get_session_id),
        app_settings: Settings = Depends(get_settings),
        selector: EnvironmentSelector = Depends(get_selector),
        token_accessor: SessionTokenAccessor = Depends(get_token_accessor),
        api_client: HubSpotApiClient = Depends(get_api_client),
):
    snapshot = selector.current
    parts = [
        "<h1>HubSpot OAuth 2.0 Quickstart App</h1>",
        f"<h2>Node Env: {app_settings.NODE_ENV}</h2>",
        f"<h2>Active Hubspot Env: {snapshot.env.value}</h2>",
        "<p>Toggle between Hubspot QA and PROD Urls for interacting with oAuth and Hubspot Accounts</p>",
        '<button id="env-toggle-btn">Toggle Hubspot Env</button>',
        f"""
  <script>
    document.getElementById("env-toggle-btn").addEventListener("click", ()=> {{
      fetch('{app_settings.APP_BASE_URL}/env-toggle')
      .then(response => response.json())
      .then(data => console.log(data));
    }});
  </script>
  """,
    ]

    if token_accessor.is_authorized(session_id):
        token_result = await token_accessor.get_access_token(session_id, snapshot)
        if isinstance(token_result, Ok):
            contact = await api_client.get_contact(token_result.value, snapshot)
            parts.append(f"<h4>Access token: {token_result.value}</h4>")
            parts.append(render_contact(contact))
        elif isinstance(token_result, Err):
            parts.append(f"<p>Unable to retrieve access token! Error Message: {token_result.message}</p>")

    parts.extend([
        "<p>If you switch environments you might need to reinstall the app</p>",
        '<a href="/install"><h3>Install the app</h3></a>',
        "<h2 style='color:red'>If you toggle between environments refresh the page, no react here</h2>",
    ])
    return HTMLResponse("".join(parts))


@router.get("/env-toggle")
async def env_toggle(selector: EnvironmentSelector = Depends(get_selector)):
    try:
        snapshot = selector.toggle()
    except ConfigurationError as e:
        print(f"MAIN: /env-toggle - {e.message} Staying on {selector.current.env.value}.")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "status": "error",
                "error": "missing_config",
                "missing": e.missing,
                "hubspotEnv": selector.current.env.value,
            },
        )
    return {"hubspotEnv": snapshot.env.value}


@router.get("/error", response_class=HTMLResponse)
async def error_page(msg: str = ""):
    # Rendered as-is; the message comes from our own redirect.
    return HTMLResponse(f"<h4>Error: {msg}</h4>")


@router.post("/webhook")
async def webhook(request: Request):
    body = await request.body()
    print(f"MAIN: /webhook - Received {len(body)} bytes: {body.decode('utf-8', errors='replace')}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- FastAPI App Setup ---
def create_app(
        app_settings: Settings,
        transport: typing.Optional[httpx.AsyncBaseTransport] = None,
        clock: typing.Optional[typing.Callable[[], float]] = None,
        refresh_store: typing.Optional[TokenStore] = None,
        access_cache: typing.Optional[TokenStore] = None,
) -> FastAPI:
    """
    Builds the app and its collaborators. transport replaces the network for
    outbound HubSpot calls; clock drives access token expiry.
    """
    # Fails here, before serving anything, if the active env has no credentials.
    selector = EnvironmentSelector(app_settings)

    store_kwargs = {"clock": clock} if clock else {}
    refresh_store = refresh_store if refresh_store is not None else InMemoryTokenStore(**store_kwargs)
    access_cache = access_cache if access_cache is not None else InMemoryTokenStore(**store_kwargs)

    exchange_client = OAuthExchangeClient(
        refresh_store,
        access_cache,
        expiry_factor=app_settings.ACCESS_TOKEN_EXPIRY_FACTOR,
        timeout=app_settings.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        print("--- HubSpot OAuth Quickstart (FastAPI) Starting Up ---")
        print(f"Active HubSpot Env: {selector.current.env.value}")
        print(f"App Base URL: {app_settings.APP_BASE_URL}")
        print(f"Redirect URI: {app_settings.REDIRECT_URI}")
        print(f"Scopes: {app_settings.SCOPE_STRING}")
        print(f"Access token cache factor: {app_settings.ACCESS_TOKEN_EXPIRY_FACTOR}")
        print(f"=== Starting your app on {app_settings.APP_BASE_URL} ===")
        print("-------------------------------------------")
        if app_settings.OPEN_BROWSER:
            webbrowser.open(app_settings.APP_BASE_URL)
        yield

    app = FastAPI(
        title="HubSpot OAuth 2.0 Quickstart",
        description="Authorization code flow against HubSpot with a QA/PROD toggle.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        SessionMiddlewareCustom,
        max_age=app_settings.SESSION_COOKIE_MAX_AGE,
        secure=app_settings.APP_BASE_URL.startswith("https://"),
    )

    app.state.settings = app_settings
    app.state.selector = selector
    app.state.refresh_store = refresh_store
    app.state.access_cache = access_cache
    app.state.exchange_client = exchange_client
    app.state.token_accessor = SessionTokenAccessor(refresh_store, access_cache, exchange_client)
    app.state.api_client = HubSpotApiClient(timeout=app_settings.HTTP_TIMEOUT_SECONDS, transport=transport)

    app.include_router(router)
    return app


app = create_app(settings)
