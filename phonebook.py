"""
Phonebook client.

``PersonService`` talks to the ``/api/persons`` endpoints and ``Phonebook``
keeps the view state of the contact form: the contact list, the form
fields, the filter text and a transient notification.
"""

import asyncio
import logging
from typing import Callable, List, Optional

import httpx

logger = logging.getLogger(__name__)

MESSAGE_DELAY = 3.0


class PersonService:
    def __init__(self, client: httpx.AsyncClient, base_url: str = "/api/persons"):
        self.client = client
        self.base_url = base_url

    async def get_all(self) -> List[dict]:
        response = await self.client.get(self.base_url)
        response.raise_for_status()
        return response.json()

    async def create(self, person: dict) -> dict:
        response = await self.client.post(self.base_url, json=person)
        response.raise_for_status()
        return response.json()

    async def update(self, person_id: str, name: str, number: str) -> dict:
        response = await self.client.put(f"{self.base_url}/{person_id}", json={"name": name, "number": number})
        response.raise_for_status()
        return response.json()

    async def remove(self, person_id: str) -> None:
        response = await self.client.delete(f"{self.base_url}/{person_id}")
        response.raise_for_status()


def error_message(exc: httpx.HTTPStatusError) -> str:
    try:
        return exc.response.json()["error"]
    except (ValueError, KeyError, TypeError):
        return f"request failed with status {exc.response.status_code}"


class Phonebook:
    """View state of the phonebook form.

    Contacts are keyed by their server ``id``; ``name`` is only used to
    decide between creating a contact and replacing an existing number.
    """

    def __init__(self, service: PersonService, message_delay: float = MESSAGE_DELAY):
        self.service = service
        self.message_delay = message_delay
        self.persons: List[dict] = []
        self.loaded = False
        self.new_name = ""
        self.new_number = ""
        self.filter_text = ""
        self.message: Optional[str] = None
        self.message_kind: Optional[str] = None
        self._clear_handle: Optional[asyncio.TimerHandle] = None

    async def load(self) -> None:
        self.persons = await self.service.get_all()
        self.loaded = True
        logger.debug("Loaded %d contacts", len(self.persons))

    def visible(self) -> List[dict]:
        return [p for p in self.persons if self.filter_text in p["name"]]

    def find(self, name: str) -> Optional[dict]:
        return next((p for p in self.persons if p["name"] == name), None)

    def notify(self, message: str, kind: str = "success") -> None:
        """Show ``message`` and schedule its removal, replacing any pending one."""
        if self._clear_handle is not None:
            self._clear_handle.cancel()
        self.message = message
        self.message_kind = kind
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(self.message_delay, self._clear_message)

    def _clear_message(self) -> None:
        self.message = None
        self.message_kind = None
        self._clear_handle = None

    def cancel_pending(self) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None

    def _reset_form(self) -> None:
        self.new_name = ""
        self.new_number = ""

    async def submit(self, confirm: Callable[[str], bool]) -> Optional[dict]:
        name, number = self.new_name, self.new_number
        existing = self.find(name)
        if existing is None:
            return await self._add(name, number)

        if not confirm(f"{name} is already added to phonebook, replace the old number with a new one?"):
            return None
        return await self._replace(existing, number)

    async def _add(self, name: str, number: str) -> Optional[dict]:
        try:
            created = await self.service.create({"name": name, "number": number})
        except httpx.HTTPStatusError as exc:
            self.notify(error_message(exc), kind="error")
            return None
        self.persons = self.persons + [created]
        self.notify(f"Added {name}")
        self._reset_form()
        return created

    async def _replace(self, existing: dict, number: str) -> Optional[dict]:
        name = existing["name"]
        try:
            updated = await self.service.update(existing["id"], name, number)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                self.persons = [p for p in self.persons if p["id"] != existing["id"]]
                self.notify(f"Information of {name} has already been removed from server", kind="error")
            else:
                self.notify(error_message(exc), kind="error")
            return None
        self.persons = [updated if p["id"] == existing["id"] else p for p in self.persons]
        self.notify(f"Updated {name}'s number")
        self._reset_form()
        return updated

    async def remove(self, person: dict, confirm: Callable[[str], bool]) -> bool:
        if not confirm(f"Delete {person['name']}?"):
            return False
        try:
            await self.service.remove(person["id"])
        except httpx.HTTPStatusError as exc:
            self.notify(error_message(exc), kind="error")
            return False
        self.persons = [p for p in self.persons if p["id"] != person["id"]]
        self.notify(f"Deleted {person['name']}")
        return True
