from __future__ import annotations

import asyncio

import httpx
from conftest import create_form

from formsync.client import FormsClient
from formsync.errors import NotFound, Unauthorized
from formsync.gate import Decision
from formsync.mutations import Status
from formsync.notify import FAILURE
from formsync.screens import CreateScreen, DashboardScreen, EditScreen


def test_create_publishes_and_lands_in_edit(api, connect, make_session):
    async def scenario():
        async with connect() as client:
            session = make_session(client)
            session.store.set_title("Dirty leftover")
            screen = CreateScreen(session)
            screen.enter()
            view = await screen.render()
            assert view.title == "Untitled form"
            assert view.icon == "/img/defaultIcon.svg"

            session.store.set_title("Signup")
            session.store.add_block({"type": "text", "label": "Email"})
            outcome = await screen.publish()
            return session, outcome

    session, outcome = asyncio.run(scenario())

    assert outcome.ok
    assert session.navigator.current == f"/{outcome.value}/edit"
    stored = api.get(f"/api/forms/{outcome.value}").json()
    assert stored["title"] == "Signup"
    assert stored["workspace"] == "alice"
    assert stored["blocks"][0]["label"] == "Email"


def test_create_can_resume_a_process_wide_draft(connect, make_session):
    async def scenario():
        async with connect() as client:
            session = make_session(client)
            session.store.set_title("Half done")
            screen = CreateScreen(session, resume=True)
            screen.enter()
            return await screen.render()

    assert asyncio.run(scenario()).title == "Half done"


def test_edit_seeds_once_and_keeps_local_edits(api, connect, make_session):
    form_id = create_form(api)

    async def scenario():
        async with connect() as client:
            session = make_session(client)
            screen = EditScreen(session, form_id)
            first = await screen.render()
            session.store.set_title("Local edit")
            second = await screen.render()
            return first, second

    first, second = asyncio.run(scenario())
    assert first.gate.decision is Decision.AUTHORIZED
    assert first.draft.title == "Feedback"
    assert first.draft.blocks == [{"id": "b1", "type": "text", "label": "Name"}]
    assert second.draft.title == "Local edit"


def test_edit_save_persists_and_reseeds(api, connect, make_session):
    form_id = create_form(api)

    async def scenario():
        async with connect() as client:
            session = make_session(client)
            screen = EditScreen(session, form_id)
            await screen.render()
            session.store.set_title("Saved title")
            outcome = await screen.save()
            view = await screen.render()
            return outcome, view

    outcome, view = asyncio.run(scenario())
    assert outcome.ok
    assert view.draft.title == "Saved title"
    assert api.get(f"/api/forms/{form_id}").json()["title"] == "Saved title"


def test_failed_save_keeps_local_edits_for_retry(make_session):
    served = {"id": "f1", "workspace": "alice", "title": "Server title", "blocks": []}
    reads = []

    def handler(request):
        if request.method == "GET":
            reads.append(request.url.path)
            return httpx.Response(200, json=served)
        return httpx.Response(500, json={"detail": "down"})

    async def scenario():
        transport = httpx.MockTransport(handler)
        async with FormsClient("http://testserver", transport=transport) as client:
            session = make_session(client)
            screen = EditScreen(session, "f1")
            await screen.render()
            session.store.set_title("Unsaved title")
            outcome = await screen.save()
            view = await screen.render()
            return session, outcome, view

    session, outcome, view = asyncio.run(scenario())
    assert outcome.status is Status.FAILED
    assert session.notifier.last().phase == FAILURE
    assert session.store.title == "Unsaved title"
    assert view.draft.title == "Unsaved title"
    assert reads == ["/api/forms/f1"]


def test_edit_denies_other_workspaces(api, connect, make_session):
    form_id = create_form(api)

    async def scenario():
        async with connect() as client:
            session = make_session(client, subject_id="mallory")
            view = await EditScreen(session, form_id).render()
            return session, view

    session, view = asyncio.run(scenario())
    assert view.gate.decision is Decision.UNAUTHORIZED
    assert isinstance(view.gate.error, Unauthorized)
    assert view.draft is None
    assert session.store.title == ""


def test_edit_reports_missing_forms(connect, make_session):
    async def scenario():
        async with connect() as client:
            return await EditScreen(make_session(client), "missing").render()

    view = asyncio.run(scenario())
    assert view.gate.decision is Decision.ERROR
    assert isinstance(view.gate.error, NotFound)


def test_edit_switch_reseeds_for_the_new_form(api, connect, make_session):
    first_id = create_form(api, title="First")
    second_id = create_form(api, title="Second")

    async def scenario():
        async with connect() as client:
            session = make_session(client)
            screen = EditScreen(session, first_id)
            await screen.render()
            session.store.set_title("Unsaved")
            screen.switch(second_id)
            return await screen.render()

    assert asyncio.run(scenario()).draft.title == "Second"


def test_dashboard_lists_responses_and_share_link(api, connect, make_session):
    form_id = create_form(api)
    api.post(f"/api/forms/{form_id}/responses", json={"data": {"a": 1, "b": 2}}).raise_for_status()
    api.post(f"/api/forms/{form_id}/responses", json={"data": {"a": 3, "c": 4}}).raise_for_status()

    async def scenario():
        async with connect() as client:
            session = make_session(client)
            screen = DashboardScreen(session, form_id)
            view = await screen.render()
            copied = screen.copy_share_link()
            return session, view, copied

    session, view, copied = asyncio.run(scenario())
    assert view.gate.allowed
    assert view.table.columns == ["a", "b"]
    assert [row.cells for row in view.table.rows] == [[1, 2], [3, ""]]
    assert view.share_link == f"https://forms.example.com/{form_id}/viewform"
    assert copied == view.share_link
    assert session.notifier.last().message == "Link copied to clipboard"


def test_dashboard_empty_state(api, connect, make_session):
    form_id = create_form(api)

    async def scenario():
        async with connect() as client:
            return await DashboardScreen(make_session(client), form_id).render()

    view = asyncio.run(scenario())
    assert view.table.empty
    assert view.table.empty_message == "There are no responses yet"


def test_lock_responses_keeps_public_flag(api, connect, make_session):
    form_id = create_form(api)

    async def scenario():
        async with connect() as client:
            screen = DashboardScreen(make_session(client), form_id)
            await screen.render()
            outcome = await screen.toggle_locked(True)
            view = await screen.render()
            return outcome, view

    outcome, view = asyncio.run(scenario())
    assert outcome.ok
    assert view.form.options == {"publicResponses": True, "lockedResponses": True}
    assert api.get(f"/api/forms/{form_id}").json()["options"] == {
        "publicResponses": True,
        "lockedResponses": True,
    }


def test_delete_navigates_away_and_closes_the_view(api, connect, make_session):
    form_id = create_form(api)

    async def scenario():
        async with connect() as client:
            session = make_session(client)
            screen = DashboardScreen(session, form_id)
            await screen.render()
            declined = await screen.delete(confirm=lambda prompt: False)
            outcome = await screen.delete(confirm=lambda prompt: True)
            view = await screen.render()
            return session, declined, outcome, view

    session, declined, outcome, view = asyncio.run(scenario())
    assert declined.status is Status.SKIPPED
    assert outcome.ok
    assert session.navigator.current == "/create"
    assert view.gate.decision is Decision.ERROR
    assert isinstance(view.gate.error, NotFound)
    assert view.form is None
    assert api.get(f"/api/forms/{form_id}").status_code == 404


def test_sidebar_flag_is_shared_between_screens(api, connect, make_session):
    form_id = create_form(api)

    async def scenario():
        async with connect() as client:
            session = make_session(client)
            CreateScreen(session).toggle_sidebar()
            edit_view = await EditScreen(session, form_id).render()
            async with connect() as other_client:
                later = make_session(other_client)
                dashboard_view = await DashboardScreen(later, form_id).render()
            return edit_view, dashboard_view

    edit_view, dashboard_view = asyncio.run(scenario())
    assert edit_view.show_sidebar is True
    assert dashboard_view.show_sidebar is True
