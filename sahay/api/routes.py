"""
API routes for the scheduling assistant.
Provides endpoints for:
- Health checks
- Conversational turns (chat)
- Direct scheduling operations (specialties, doctors, availability,
  booking, cancellation, rescheduling)
"""

import json
import logging
from datetime import datetime
from typing import Any

from aiohttp import web
from pydantic import ValidationError as ModelValidationError

from ..errors import SchedulingError, ValidationError
from ..models import ConversationTurn, TurnRole
from ..services.orchestrator import DialogueOrchestrator
from ..tools.appointment_tools import AppointmentTools, ToolResult, validate_arguments

logger = logging.getLogger(__name__)


def create_app(
    orchestrator: DialogueOrchestrator,
    tools: AppointmentTools,
) -> web.Application:
    """
    Create the aiohttp application with routes.

    Args:
        orchestrator: Runs conversational turns
        tools: Tool executor, shared with the orchestrator

    Returns:
        Configured aiohttp Application
    """
    app = web.Application(middlewares=[error_middleware])

    # Store services in app
    app["orchestrator"] = orchestrator
    app["tools"] = tools

    # Add routes
    app.router.add_get("/health", health_check)
    app.router.add_post("/api/chat", chat)
    app.router.add_get("/api/specialties", list_specialties)
    app.router.add_post("/api/doctors", find_doctors)
    app.router.add_post("/api/availability", get_availability)
    app.router.add_post("/api/appointments/book", book_appointment)
    app.router.add_post("/api/appointments/cancel", cancel_appointment)
    app.router.add_post("/api/appointments/reschedule", reschedule_appointment)

    return app


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Map typed errors to JSON responses with their status code."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except SchedulingError as e:
        if e.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {e.code}: {e.message}")
        else:
            logger.info(f"{request.method} {request.path} rejected: {e.code}: {e.message}")
        return web.json_response(e.to_dict(), status=e.status_code)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return web.json_response(
            {"success": False, "error": "internal_error", "message": "Internal server error"},
            status=500,
        )


async def _read_body(request: web.Request) -> dict:
    if not request.can_read_body:
        return {}
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("Request body must be valid UTF-8 JSON") from e
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _result_response(result: ToolResult) -> web.Response:
    body: dict[str, Any] = {"success": result.success, "message": result.message}
    if isinstance(result.data, dict):
        body.update(result.data)
    return web.json_response(body)


async def _run_operation(request: web.Request, tool_name: str, data: dict) -> web.Response:
    tools: AppointmentTools = request.app["tools"]
    args = validate_arguments(tools.schema_for(tool_name), data)
    handler = getattr(tools, tool_name)
    return _result_response(await handler(args))


async def health_check(request: web.Request) -> web.Response:
    """Health check endpoint."""
    return web.json_response({
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "service": "sahay-assistant",
    })


def _check_sequence(turns: list[ConversationTurn]) -> None:
    # Every tool turn answers a call of the nearest earlier assistant turn,
    # and every call is answered before the conversation moves on.
    pending: set[str] = set()
    for index, turn in enumerate(turns):
        if turn.role == TurnRole.TOOL:
            call_id = turn.tool_result.tool_call_id
            if call_id not in pending:
                raise ValidationError(
                    f"Invalid history: turn {index} answers unknown tool call '{call_id}'"
                )
            pending.discard(call_id)
            continue
        if pending:
            raise ValidationError(
                f"Invalid history: tool calls {sorted(pending)} have no results before turn {index}"
            )
        pending = {call.id for call in turn.tool_calls}


def _parse_history(raw: Any) -> list[ConversationTurn]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError("history must be a non-empty list of turns")
    try:
        turns = [ConversationTurn.model_validate(item) for item in raw]
    except ModelValidationError as e:
        raise ValidationError(f"Invalid history: {e.errors()[0]['msg']}") from e
    if turns[-1].role != TurnRole.USER:
        raise ValidationError("The last turn in history must be a user message")
    _check_sequence(turns)
    return turns


async def chat(request: web.Request) -> web.Response:
    """
    Run one conversational turn.

    Request body:
    {
        "history": [
            {"role": "user", "text": "Book me with Dr. Rao tomorrow"},
            ...
        ]
    }

    The last turn is the user's new message. The response carries the reply,
    the tool calls made during the turn, and the augmented history to send
    with the next turn.
    """
    data = await _read_body(request)
    turns = _parse_history(data.get("history"))
    technical = request.query.get("technical", "").lower() in ("1", "true", "yes")

    orchestrator: DialogueOrchestrator = request.app["orchestrator"]
    result = await orchestrator.run_turn(turns[:-1], turns[-1].text)

    return web.json_response({
        "reply": result.reply,
        "toolCalls": [log.to_display_dict(technical=technical) for log in result.tool_calls],
        "history": [turn.model_dump(mode="json") for turn in result.history],
    })


async def list_specialties(request: web.Request) -> web.Response:
    """List the specialties offered."""
    return await _run_operation(request, "list_specialties", {})


async def find_doctors(request: web.Request) -> web.Response:
    """
    Find doctors.

    Request body:
    {
        "specialty": "optional specialty",
        "doctor_name": "optional full or partial name"
    }
    """
    return await _run_operation(request, "find_doctors", await _read_body(request))


async def get_availability(request: web.Request) -> web.Response:
    """
    Free slots (or day-parts) for a doctor on a date.

    Request body:
    {
        "doctor_name": "Dr. Rao",
        "date": "2025-03-10",
        "time_of_day": "morning",   (optional)
        "view": "slots" | "periods" (optional)
    }
    """
    return await _run_operation(request, "get_availability", await _read_body(request))


async def book_appointment(request: web.Request) -> web.Response:
    """Book an appointment."""
    return await _run_operation(request, "book_appointment", await _read_body(request))


async def cancel_appointment(request: web.Request) -> web.Response:
    """Cancel an appointment."""
    return await _run_operation(request, "cancel_appointment", await _read_body(request))


async def reschedule_appointment(request: web.Request) -> web.Response:
    """Move an appointment to a new date and time."""
    return await _run_operation(request, "reschedule_appointment", await _read_body(request))
