"""Tool schema and history converters for different LLM providers."""

import json
from typing import Any

from ..models import ConversationTurn, TurnRole


def anthropic_to_gemini(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Convert Anthropic tool format to Gemini function declarations.

    Anthropic format:
    {
        "name": "tool_name",
        "description": "...",
        "input_schema": {
            "type": "object",
            "properties": {...},
            "required": [...]
        }
    }

    Gemini format:
    {
        "name": "tool_name",
        "description": "...",
        "parameters": {
            "type": "object",
            "properties": {...},
            "required": [...]
        }
    }

    Gemini rejects object schemas without properties, so tools that take no
    arguments are declared without ``parameters``.
    """
    gemini_tools = []
    for tool in tools:
        gemini_tool = {
            "name": tool["name"],
            "description": tool.get("description", ""),
        }
        schema = tool.get("input_schema") or {}
        if schema.get("properties"):
            gemini_tool["parameters"] = schema
        gemini_tools.append(gemini_tool)
    return gemini_tools


def anthropic_to_groq(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Wrap each declaration as an OpenAI-style `function` tool."""
    groq_tools = []
    for tool in tools:
        groq_tool = {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool.get("description", ""),
                "parameters": tool.get("input_schema", {
                    "type": "object",
                    "properties": {},
                }),
            },
        }
        groq_tools.append(groq_tool)
    return groq_tools


def convert_messages_to_gemini(
    messages: list[ConversationTurn],
    system_prompt: str,
) -> tuple[str, list[dict[str, Any]]]:
    """
    Convert conversation turns to Gemini contents.

    Gemini format:
    [
        {"role": "user", "parts": [{"text": "..."}]},
        {"role": "model", "parts": [{"functionCall": {...}}]},
        {"role": "user", "parts": [{"functionResponse": {...}}]},
    ]

    Consecutive tool results are merged into one user content, which is how
    Gemini expects the answers to a batch of function calls.

    Returns:
        Tuple of (system_instruction, converted_messages)
    """
    gemini_messages: list[dict[str, Any]] = []

    for turn in messages:
        if turn.role == TurnRole.TOOL:
            part = {
                "functionResponse": {
                    "name": turn.tool_result.name,
                    "response": turn.tool_result.content,
                }
            }
            previous = gemini_messages[-1] if gemini_messages else None
            if previous and previous.get("_tool_results"):
                previous["parts"].append(part)
            else:
                gemini_messages.append({"role": "user", "parts": [part], "_tool_results": True})
            continue

        parts = []
        if turn.text:
            parts.append({"text": turn.text})
        for call in turn.tool_calls:
            parts.append({
                "functionCall": {
                    "name": call.name,
                    "args": call.arguments,
                }
            })

        gemini_messages.append({
            "role": "model" if turn.role == TurnRole.ASSISTANT else "user",
            "parts": parts or [{"text": ""}],
        })

    for message in gemini_messages:
        message.pop("_tool_results", None)

    return system_prompt, gemini_messages


def convert_messages_to_groq(
    messages: list[ConversationTurn],
    system_prompt: str,
) -> list[dict[str, Any]]:
    """
    Convert conversation turns to Groq/OpenAI chat messages.

    Groq/OpenAI format:
    [
        {"role": "system", "content": "..."},
        {"role": "user", "content": "..."},
        {"role": "assistant", "content": "...", "tool_calls": [...]},
        {"role": "tool", "tool_call_id": "...", "content": "..."},
    ]
    """
    groq_messages = []

    # Add system message first
    if system_prompt:
        groq_messages.append({
            "role": "system",
            "content": system_prompt,
        })

    for turn in messages:
        if turn.role == TurnRole.USER:
            groq_messages.append({"role": "user", "content": turn.text})
        elif turn.role == TurnRole.ASSISTANT:
            assistant_msg: dict[str, Any] = {"role": "assistant", "content": turn.text}
            if turn.tool_calls:
                assistant_msg["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": call.name,
                            "arguments": json.dumps(call.arguments),
                        },
                    }
                    for call in turn.tool_calls
                ]
            groq_messages.append(assistant_msg)
        else:
            groq_messages.append({
                "role": "tool",
                "tool_call_id": turn.tool_result.tool_call_id,
                "content": json.dumps(turn.tool_result.content),
            })

    return groq_messages
