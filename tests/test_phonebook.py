"""
Tests for the phonebook client, run in-process against the persons API.
"""

import asyncio

import httpx
import pytest
import pytest_asyncio

import helper
from phonebook import Phonebook, PersonService


def accept(prompt):
    return True


def decline(prompt):
    return False


@pytest.fixture(autouse=True)
def seed_persons(store):
    store.delete_documents("person")
    for person in helper.initial_persons:
        store.create_document("person", person)


@pytest_asyncio.fixture
async def phonebook(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        book = Phonebook(PersonService(client), message_delay=0.05)
        await book.load()
        yield book
        book.cancel_pending()


@pytest.mark.asyncio
async def test_load_fetches_all_contacts(phonebook):
    assert phonebook.loaded
    assert len(phonebook.persons) == len(helper.initial_persons)
    assert all(p["id"] for p in phonebook.persons)


@pytest.mark.asyncio
async def test_new_name_is_created_and_appended(phonebook, store):
    phonebook.new_name = "Dan Abramov"
    phonebook.new_number = "12-43-234345"

    created = await phonebook.submit(accept)

    assert created["name"] == "Dan Abramov"
    assert phonebook.persons[-1] == created
    assert phonebook.message == "Added Dan Abramov"
    assert phonebook.new_name == "" and phonebook.new_number == ""
    assert len(helper.persons_in_db(store)) == len(helper.initial_persons) + 1


@pytest.mark.asyncio
async def test_existing_name_replaces_number_by_id(phonebook, store):
    target = phonebook.find("Ada Lovelace")
    phonebook.new_name = "Ada Lovelace"
    phonebook.new_number = "000"
    prompts = []

    def confirm(prompt):
        prompts.append(prompt)
        return True

    updated = await phonebook.submit(confirm)

    assert "Ada Lovelace is already added to phonebook" in prompts[0]
    assert updated["id"] == target["id"]
    assert phonebook.find("Ada Lovelace")["number"] == "000"
    assert len(phonebook.persons) == len(helper.initial_persons)
    assert store.get_document("person", target["id"])["number"] == "000"
    assert phonebook.message == "Updated Ada Lovelace's number"


@pytest.mark.asyncio
async def test_declined_replace_is_a_no_op(phonebook, store):
    phonebook.new_name = "Arto Hellas"
    phonebook.new_number = "999"

    assert await phonebook.submit(decline) is None

    assert phonebook.find("Arto Hellas")["number"] == "040-123456"
    assert phonebook.message is None
    assert phonebook.new_name == "Arto Hellas"


@pytest.mark.asyncio
async def test_replacing_a_removed_contact_reports_error(phonebook, store):
    target = phonebook.find("Arto Hellas")
    store.delete_document("person", target["id"])
    phonebook.new_name = "Arto Hellas"
    phonebook.new_number = "1"

    assert await phonebook.submit(accept) is None

    assert phonebook.find("Arto Hellas") is None
    assert phonebook.message_kind == "error"
    assert "already been removed" in phonebook.message


@pytest.mark.asyncio
async def test_filter_is_a_case_sensitive_view(phonebook):
    phonebook.filter_text = "Ada"
    assert [p["name"] for p in phonebook.visible()] == ["Ada Lovelace"]

    phonebook.filter_text = "ada"
    assert phonebook.visible() == []
    assert len(phonebook.persons) == len(helper.initial_persons)

    phonebook.filter_text = ""
    assert len(phonebook.visible()) == len(helper.initial_persons)


@pytest.mark.asyncio
async def test_remove_deletes_on_server(phonebook, store):
    target = phonebook.find("Arto Hellas")
    assert await phonebook.remove(target, accept)
    assert phonebook.find("Arto Hellas") is None
    assert store.get_document("person", target["id"]) is None
    assert phonebook.message == "Deleted Arto Hellas"


@pytest.mark.asyncio
async def test_message_clears_after_delay(phonebook):
    phonebook.notify("hello")
    assert phonebook.message == "hello"
    await asyncio.sleep(0.1)
    assert phonebook.message is None


@pytest.mark.asyncio
async def test_new_message_cancels_pending_clear(phonebook):
    phonebook.message_delay = 0.2
    phonebook.notify("first")
    await asyncio.sleep(0.1)
    phonebook.notify("second")
    await asyncio.sleep(0.15)
    # the first message's timer would have fired by now
    assert phonebook.message == "second"
    await asyncio.sleep(0.15)
    assert phonebook.message is None


@pytest.mark.asyncio
async def test_declined_remove_keeps_contact(phonebook, store):
    target = phonebook.find("Arto Hellas")
    assert not await phonebook.remove(target, decline)
    assert phonebook.find("Arto Hellas") == target
    assert store.get_document("person", target["id"]) is not None
    assert phonebook.message is None


@pytest.mark.asyncio
async def test_failed_remove_reports_error(phonebook):
    assert not await phonebook.remove({"id": "bad", "name": "X"}, accept)
    assert phonebook.message == "malformatted id"
    assert phonebook.message_kind == "error"
    assert len(phonebook.persons) == len(helper.initial_persons)
