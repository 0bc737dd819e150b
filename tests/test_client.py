from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import create_form

from formsync.client import FormsClient
from formsync.errors import FetchFailed, MutationFailed, NotFound


def test_submit_and_fetch_responses(api, connect):
    form_id = create_form(api)

    async def scenario():
        async with connect() as client:
            submitted = await client.submit_response(form_id, {"name": "Ada", "age": 36})
            listed = await client.fetch_responses(form_id)
            return submitted, listed

    submitted, listed = asyncio.run(scenario())
    assert submitted.form_id == form_id
    assert [item.id for item in listed] == [submitted.id]
    assert list(listed[0].data) == ["name", "age"]
    assert listed[0].created_time == submitted.created_time


def test_submit_to_locked_form_fails(api, connect):
    form_id = create_form(api, options={"publicResponses": False, "lockedResponses": True})

    async def scenario():
        async with connect() as client:
            await client.submit_response(form_id, {"name": "Ada"})

    with pytest.raises(MutationFailed):
        asyncio.run(scenario())


def test_fetch_missing_form_raises_not_found(connect):
    async def scenario():
        async with connect() as client:
            await client.fetch_form("missing")

    with pytest.raises(NotFound):
        asyncio.run(scenario())


def test_server_errors_map_to_fetch_and_mutation_failures():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"detail": "down"}))

    async def read():
        async with FormsClient("http://testserver", transport=transport) as client:
            await client.fetch_form("f1")

    async def write():
        async with FormsClient("http://testserver", transport=transport) as client:
            await client.delete_form("f1", "alice")

    with pytest.raises(FetchFailed):
        asyncio.run(read())
    with pytest.raises(MutationFailed):
        asyncio.run(write())


def test_transport_errors_map_to_fetch_failed():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def read():
        async with FormsClient("http://testserver", transport=httpx.MockTransport(refuse)) as client:
            await client.fetch_responses("f1")

    with pytest.raises(FetchFailed):
        asyncio.run(read())
