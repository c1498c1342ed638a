"""Tests for provider message and tool-schema conversion."""

import json

from sahay.models import ConversationTurn, ToolCall
from sahay.services.tool_converter import (
    anthropic_to_gemini,
    anthropic_to_groq,
    convert_messages_to_gemini,
    convert_messages_to_groq,
)
from sahay.tools.definitions import APPOINTMENT_TOOLS


def _history():
    calls = [
        ToolCall(id="c1", name="list_specialties", arguments={}),
        ToolCall(id="c2", name="find_doctors", arguments={"specialty": "Cardiology"}),
    ]
    return [
        ConversationTurn.user("Which doctors are there?"),
        ConversationTurn.assistant(tool_calls=calls),
        ConversationTurn.tool(calls[0], {"success": True, "message": "Cardiology"}),
        ConversationTurn.tool(calls[1], {"success": True, "message": "Dr. Rao"}),
        ConversationTurn.assistant(text="Dr. Rao is a cardiologist."),
    ]


def test_gemini_declarations_drop_empty_parameters():
    declarations = {d["name"]: d for d in anthropic_to_gemini(APPOINTMENT_TOOLS)}

    assert "parameters" not in declarations["list_specialties"]
    assert declarations["book_appointment"]["parameters"]["required"] == [
        "doctor_name", "patient_name", "phone", "date", "time",
    ]


def test_groq_tool_format():
    tools = anthropic_to_groq(APPOINTMENT_TOOLS)
    assert all(t["type"] == "function" for t in tools)
    assert tools[0]["function"]["name"] == "list_specialties"


def test_gemini_merges_consecutive_tool_results():
    system, contents = convert_messages_to_gemini(_history(), "system prompt")

    assert system == "system prompt"
    assert [c["role"] for c in contents] == ["user", "model", "user", "model"]
    assert len(contents[1]["parts"]) == 2
    responses = contents[2]["parts"]
    assert [p["functionResponse"]["name"] for p in responses] == ["list_specialties", "find_doctors"]
    assert all("_tool_results" not in c for c in contents)


def test_groq_messages():
    messages = convert_messages_to_groq(_history(), "system prompt")

    assert [m["role"] for m in messages] == ["system", "user", "assistant", "tool", "tool", "assistant"]
    assert messages[2]["tool_calls"][1]["function"]["arguments"] == json.dumps({"specialty": "Cardiology"})
    assert messages[3]["tool_call_id"] == "c1"
    assert json.loads(messages[4]["content"]) == {"success": True, "message": "Dr. Rao"}
