# src/hubspot_oauth_quickstart/hubspot_api.py

import typing

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from .environment import EnvironmentSnapshot
from .oauth_client import parse_provider_error
from .results import Ok, Err, ProviderError, Result

CONTACTS_PATH = "/contacts/v1/lists/all/contacts/all"


class ContactProperty(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: typing.Optional[str] = None


class Contact(BaseModel):
    model_config = ConfigDict(extra="allow")

    vid: typing.Optional[int] = None
    properties: typing.Dict[str, ContactProperty] = {}

    def property_value(self, name: str) -> str:
        prop = self.properties.get(name)
        return prop.value if prop and prop.value is not None else ""

    @property
    def full_name(self) -> str:
        return f"{self.property_value('firstname')} {self.property_value('lastname')}".strip()


class HubSpotApiClient:
    def __init__(self, timeout: float = 10.0, transport: typing.Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    async def get_contact(self, access_token: str, snapshot: EnvironmentSnapshot) -> Result[Contact]:
        """Fetches the first contact of the account the access token belongs to."""
        print("")
        print("HUBSPOT_API: === Retrieving a contact from HubSpot using the access token ===")
        url = f"{snapshot.urls.api_base_url}{CONTACTS_PATH}"
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json"
        }
        print("HUBSPOT_API: ===> Replace the following GET to test other API calls")
        print(f"HUBSPOT_API: ===> GET {url}?count=1")
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.get(url, headers=headers, params={"count": 1})
        except httpx.RequestError as e:
            print(f"HUBSPOT_API:   > Unable to retrieve contact: {e!r}")
            return Err(ProviderError(message=f"Could not reach HubSpot API: {e}"))

        if response.is_error:
            print(f"HUBSPOT_API:   > Unable to retrieve contact (HTTP {response.status_code})")
            return Err(parse_provider_error(response))

        try:
            contacts = response.json().get("contacts") or []
            if not isinstance(contacts, list):
                raise ValueError(f"'contacts' is a {type(contacts).__name__}, expected a list")
            if not contacts:
                return Err(ProviderError(message="No contacts found in this HubSpot account."))
            return Ok(Contact.model_validate(contacts[0]))
        except (ValueError, AttributeError, KeyError, TypeError, ValidationError) as e:
            print(f"HUBSPOT_API:   > Malformed contacts response: {e}")
            return Err(ProviderError(message=f"Malformed contacts response from HubSpot: {response.text[:200]}"))
