"""
Neurotech Test Suite — Dashboard API
=====================================
Tests for the FastAPI endpoints, driven through TestClient with a mock
AI provider so no network calls are made.

Usage:
    python -m pytest tests/test_server.py -v
    python tests/test_server.py
"""
import sys
import os
import json
import asyncio
import threading
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi import HTTPException
from fastapi.testclient import TestClient

from neurotech import server
from neurotech.assistant import Assistant, CHAT_ERROR_REPLY
from neurotech.config import Settings
from neurotech.providers.base import BaseProvider, ProviderConfig, ProviderResponse
from neurotech.seed import initial_state
from neurotech.state import Store


class MockProvider(BaseProvider):
    """Returns canned text for structured calls and chat."""

    def __init__(self, generate_text="[]", chat_text="On it!", should_fail=False):
        super().__init__(ProviderConfig(provider_name="mock", model="mock-model"))
        self.generate_text = generate_text
        self.chat_text = chat_text
        self.should_fail = should_fail
        self.last_history = None

    def generate(self, prompt, system_instruction="", response_schema=None):
        if self.should_fail:
            return ProviderResponse(content="", error="Mock failure")
        return ProviderResponse(content=self.generate_text)

    def chat(self, history, message, system_instruction=""):
        self.last_history = list(history)
        if self.should_fail:
            return ProviderResponse(content="", error="Mock failure")
        return ProviderResponse(content=self.chat_text)

    def is_available(self):
        return True


class ServerTestCase(unittest.TestCase):

    provider_kwargs = {}

    def setUp(self):
        self.provider = MockProvider(**self.provider_kwargs)
        self.store = Store(initial_state())
        server.configure(
            Settings(provider="mock", user_name="Alex Developer"),
            self.store,
            Assistant(self.provider),
        )
        self.client = TestClient(server.app)


# ─────────────────────────────────────────────
#  State, views, dashboard
# ─────────────────────────────────────────────

class TestStateEndpoints(ServerTestCase):

    def test_index_served(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("Neurotech", response.text)

    def test_index_escapes_authored_text(self):
        page = self.client.get("/").text
        self.assertIn("const esc", page)
        for raw in ("${m.content}", "${m.sender}", "${t.title}", "${p.name}"):
            self.assertNotIn(raw, page)
        self.assertIn("esc(m.content)", page)

    def test_state(self):
        data = self.client.get("/api/state").json()
        self.assertEqual(data["currentView"], "DASHBOARD")
        self.assertEqual(len(data["projects"]), 3)
        self.assertEqual(len(data["tasks"]), 6)
        self.assertEqual(len(data["messages"]), 2)
        self.assertEqual(data["currentUser"]["name"], "Alex Developer")

    def test_change_view(self):
        response = self.client.put("/api/view", json={"view": "ROUTINES"})
        self.assertEqual(response.json(), {"currentView": "ROUTINES"})
        self.assertEqual(self.store.state.current_view.value, "ROUTINES")

    def test_invalid_view_rejected(self):
        self.assertEqual(self.client.put("/api/view", json={"view": "SETTINGS"}).status_code, 422)

    def test_dashboard(self):
        data = self.client.get("/api/dashboard").json()
        self.assertEqual(data["total"], 6)
        self.assertEqual(len(data["distribution"]), 3)


# ─────────────────────────────────────────────
#  Projects and tasks
# ─────────────────────────────────────────────

class TestProjectEndpoints(ServerTestCase):

    def test_create_and_list_project(self):
        response = self.client.post("/api/projects", json={"name": "Hiring"})
        self.assertEqual(response.status_code, 201)
        names = [p["name"] for p in self.client.get("/api/projects").json()]
        self.assertIn("Hiring", names)

    def test_delete_project_cascades(self):
        response = self.client.delete("/api/projects/1")
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.store.state.find_project("1"))
        self.assertEqual(self.store.state.tasks_for_project("1"), [])
        self.assertIsNotNone(self.store.state.find_task("103"))

    def test_board_for_unknown_project_is_404(self):
        self.assertEqual(self.client.get("/api/projects/nope/board").status_code, 404)

    def test_add_task_lands_in_pending_column(self):
        response = self.client.post("/api/tasks", json={
            "projectId": "1", "title": "Write tests", "priority": "high", "dueDate": "2024-01-01",
        })
        self.assertEqual(response.status_code, 201)
        task_id = response.json()["id"]

        board = self.client.get("/api/projects/1/board").json()
        columns = {c["status"]: [t["id"] for t in c["tasks"]] for c in board["columns"]}
        self.assertEqual(columns["PENDING"].count(task_id), 1)
        self.assertNotIn(task_id, columns["SCHEDULED"] + columns["COMPLETED"])

    def test_add_task_to_unknown_project_is_404(self):
        response = self.client.post("/api/tasks", json={"projectId": "nope", "title": "X"})
        self.assertEqual(response.status_code, 404)

    def test_blank_title_rejected(self):
        response = self.client.post("/api/tasks", json={"projectId": "1", "title": "   "})
        self.assertEqual(response.status_code, 422)

    def test_move_task(self):
        response = self.client.patch("/api/tasks/102", json={"status": "SCHEDULED"})
        self.assertEqual(response.json()["status"], "SCHEDULED")
        self.assertEqual(self.store.state.find_task("102").status.value, "SCHEDULED")

    def test_move_unknown_task_is_404(self):
        response = self.client.patch("/api/tasks/missing", json={"status": "COMPLETED"})
        self.assertEqual(response.status_code, 404)

    def test_delete_task(self):
        self.client.delete("/api/tasks/101")
        self.assertIsNone(self.store.state.find_task("101"))


class TestGenerateTasks(ServerTestCase):

    provider_kwargs = {"generate_text": json.dumps([
        {"title": "Book venue", "priority": "high"},
        {"title": "Send invites", "priority": "medium"},
    ])}

    def test_suggestions_become_pending_tasks(self):
        response = self.client.post("/api/projects/3/generate",
                                    json={"prompt": "Plan a retreat", "dueDate": "2024-06-01"})
        data = response.json()
        self.assertEqual(data["outcome"], "ok")
        self.assertEqual([t["title"] for t in data["tasks"]], ["Book venue", "Send invites"])
        self.assertTrue(all(t["projectId"] == "3" for t in data["tasks"]))
        self.assertTrue(all(t["status"] == "PENDING" for t in data["tasks"]))
        self.assertEqual(data["tasks"][0]["priority"], "high")
        self.assertEqual(data["tasks"][0]["dueDate"], "2024-06-01")

    def test_key_released_after_call(self):
        self.client.post("/api/projects/3/generate", json={"prompt": "x"})
        self.assertFalse(self.store.is_pending("subtasks:3"))

    def test_concurrent_request_is_409(self):
        self.store.begin_request("subtasks:3")
        response = self.client.post("/api/projects/3/generate", json={"prompt": "x"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(len(self.store.state.tasks_for_project("3")), 0)

    def test_other_project_not_blocked(self):
        self.store.begin_request("subtasks:3")
        response = self.client.post("/api/projects/1/generate", json={"prompt": "x"})
        self.assertEqual(response.status_code, 200)


class TestGenerateFailure(ServerTestCase):

    provider_kwargs = {"should_fail": True}

    def test_failure_adds_nothing(self):
        before = len(self.store.state.tasks)
        data = self.client.post("/api/projects/1/generate", json={"prompt": "x"}).json()
        self.assertEqual(data, {"outcome": "transport_failure", "tasks": []})
        self.assertEqual(len(self.store.state.tasks), before)


# ─────────────────────────────────────────────
#  Routines
# ─────────────────────────────────────────────

class TestRoutineEndpoints(ServerTestCase):

    provider_kwargs = {"generate_text": json.dumps([{"title": "Stretch"}, {"title": "Journal"}])}

    def test_list_with_progress(self):
        data = self.client.get("/api/routines").json()
        self.assertEqual(len(data["routines"]), 3)
        self.assertEqual(data["progress"]["completed"], 1)

    def test_add_routine(self):
        response = self.client.post("/api/routines", json={"title": "Drink water"})
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["isRoutine"])
        self.assertEqual(body["status"], "PENDING")

    def test_toggle(self):
        self.assertEqual(self.client.post("/api/routines/202/toggle").json()["status"], "COMPLETED")
        self.assertEqual(self.client.post("/api/routines/202/toggle").json()["status"], "PENDING")

    def test_toggle_unknown_is_404(self):
        self.assertEqual(self.client.post("/api/routines/missing/toggle").status_code, 404)

    def test_suggest(self):
        data = self.client.post("/api/routines/suggest", json={"goal": "be healthier"}).json()
        self.assertEqual(data["outcome"], "ok")
        self.assertEqual([r["title"] for r in data["routines"]], ["Stretch", "Journal"])
        self.assertEqual(len(self.store.state.routines), 5)

    def test_suggest_while_pending_is_409(self):
        self.store.begin_request("routines")
        response = self.client.post("/api/routines/suggest", json={"goal": "x"})
        self.assertEqual(response.status_code, 409)
        self.assertTrue(self.store.is_pending("routines"))


# ─────────────────────────────────────────────
#  Team chat
# ─────────────────────────────────────────────

class TestChatEndpoints(ServerTestCase):

    def test_plain_message_gets_no_reply(self):
        response = self.client.post("/api/messages", json={"content": "Morning all"})
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertIsNone(data["outcome"])
        self.assertEqual(len(data["messages"]), 1)
        self.assertEqual(data["messages"][0]["sender"], "Alex Developer")
        self.assertTrue(data["messages"][0]["avatar"])
        self.assertIsNone(self.provider.last_history)

    def test_mention_appends_user_then_ai(self):
        data = self.client.post("/api/messages", json={"content": "@AI what's next?"}).json()
        self.assertEqual(data["outcome"], "ok")
        self.assertEqual([m["isAi"] for m in data["messages"]], [False, True])
        self.assertEqual(data["messages"][1]["content"], "On it!")

        log = self.client.get("/api/messages").json()
        self.assertEqual(len(log), 4)
        self.assertEqual(log[-1]["sender"], "Neurotech AI")

    def test_transcript_includes_prior_log_and_new_message(self):
        self.client.post("/api/messages", json={"content": "@ai help", "sender": "Bob"})
        history = self.provider.last_history
        self.assertEqual(len(history), 3)
        self.assertEqual(history[0].role, "model")
        self.assertEqual(history[1].text,
                         "Sarah Designer: Hey everyone, just uploaded the new mockups to the project drive.")
        self.assertEqual(history[-1].text, "Bob: @ai help")

    def test_mention_while_reply_pending_keeps_message(self):
        self.store.begin_request("chat")
        response = self.client.post("/api/messages", json={"content": "@AI hi"})
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["outcome"], "busy")
        self.assertEqual([m["content"] for m in data["messages"]], ["@AI hi"])
        self.assertEqual(self.store.state.messages[-1].content, "@AI hi")
        self.assertIsNone(self.provider.last_history)
        self.assertTrue(self.store.is_pending("chat"))


class TestChatFailure(ServerTestCase):

    provider_kwargs = {"should_fail": True}

    def test_failure_posts_apology(self):
        data = self.client.post("/api/messages", json={"content": "@AI hi"}).json()
        self.assertEqual(data["outcome"], "transport_failure")
        self.assertEqual(data["messages"][1]["content"], CHAT_ERROR_REPLY)
        self.assertFalse(self.store.is_pending("chat"))


class BlockingProvider(MockProvider):
    """Holds each call until ``release`` is set, signalling ``started`` first."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.started = threading.Event()
        self.release = threading.Event()

    def generate(self, prompt, system_instruction="", response_schema=None):
        self.started.set()
        self.release.wait(5)
        return super().generate(prompt, system_instruction, response_schema)

    def chat(self, history, message, system_instruction=""):
        self.started.set()
        self.release.wait(5)
        return super().chat(history, message, system_instruction)


def _body(response):
    return json.loads(response.body)


class TestOverlappingRequests(unittest.TestCase):
    """State changes that land while an AI call is still running."""

    def setUp(self):
        self.provider = BlockingProvider(
            generate_text=json.dumps([{"title": "Orphan", "priority": "low"}]),
            chat_text="reply",
        )
        self.store = Store(initial_state())
        server.configure(Settings(provider="mock"), self.store, Assistant(self.provider))

    async def _wait_started(self):
        self.assertTrue(await asyncio.to_thread(self.provider.started.wait, 5))

    def test_project_deleted_during_generate(self):
        async def scenario():
            generating = asyncio.create_task(
                server.api_generate("1", server.GenerateRequest(prompt="Plan it"))
            )
            await self._wait_started()
            await server.api_delete_project("1")
            self.provider.release.set()
            try:
                await generating
            except HTTPException as e:
                return e.status_code
            return None

        self.assertEqual(asyncio.run(scenario()), 404)
        self.assertIsNone(self.store.state.find_project("1"))
        self.assertEqual(self.store.state.tasks_for_project("1"), [])
        self.assertEqual([t for t in self.store.state.tasks if t.title == "Orphan"], [])
        self.assertFalse(self.store.is_pending("subtasks:1"))

    def test_second_mention_while_reply_pending(self):
        async def scenario():
            first = asyncio.create_task(
                server.api_post_message(server.MessageRequest(content="@AI one"))
            )
            await self._wait_started()
            second = await server.api_post_message(server.MessageRequest(content="@AI two"))
            self.provider.release.set()
            return _body(await first), second.status_code, _body(second)

        first, second_status, second = asyncio.run(scenario())

        self.assertEqual(second_status, 201)
        self.assertEqual(second["outcome"], "busy")
        self.assertEqual(first["outcome"], "ok")
        self.assertEqual([m.content for m in self.store.state.messages[2:]],
                         ["@AI one", "@AI two", "reply"])
        self.assertFalse(self.store.is_pending("chat"))


class TestProvidersEndpoint(ServerTestCase):

    def test_reports_active_provider(self):
        data = self.client.get("/api/providers").json()
        self.assertEqual(data["active"], "mock")
        self.assertEqual(data["model"], "mock-model")
        self.assertIn("gemini", data["providers"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
