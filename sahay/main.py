"""
Main entry point for the Sahay scheduling assistant.
Wires storage, the scheduling engine, the tools and the model provider,
then starts the HTTP API server.
"""

import logging
import sys
from functools import partial

from aiohttp import web
from dotenv import load_dotenv

from config.settings import Settings, get_settings
from sahay.errors import ConfigurationError
from sahay.api.routes import create_app
from sahay.services.directory import DoctorDirectory
from sahay.services.ledger import AppointmentLedger, DoctorStore
from sahay.services.llm_service import LLMService, build_provider, get_system_prompt
from sahay.services.memory_store import MemoryDoctorStore, MemoryLedger
from sahay.services.orchestrator import DialogueOrchestrator
from sahay.services.scheduling import SchedulingEngine
from sahay.services.slot_generator import SlotGenerator, parse_break
from sahay.services.supabase_service import SupabaseDoctorStore, SupabaseLedger, create_supabase_client
from sahay.tools.appointment_tools import AppointmentTools

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables (override=True ensures .env values take precedence)
load_dotenv(override=True)


async def build_storage(settings: Settings) -> tuple[DoctorStore, AppointmentLedger]:
    """Construct the doctor store and appointment ledger for the configured backend."""
    if settings.storage_backend == "memory":
        logger.warning("Using the in-memory ledger: appointments are lost on restart")
        return MemoryDoctorStore.from_json_file(settings.doctors_seed_file), MemoryLedger()

    client = await create_supabase_client(
        url=settings.supabase_url,
        key=settings.supabase_service_role_key,
    )
    return SupabaseDoctorStore(client), SupabaseLedger(client)


def build_slot_generator(settings: Settings) -> SlotGenerator:
    """
    Raises:
        ConfigurationError: If a break window is malformed
    """
    try:
        breaks = [parse_break(window) for window in settings.break_windows]
    except ValueError as e:
        raise ConfigurationError(f"Invalid SLOT_BREAKS: {e}") from e

    return SlotGenerator(
        slot_duration_minutes=settings.slot_duration_minutes,
        breaks=breaks,
        afternoon_start=settings.afternoon_start,
        evening_start=settings.evening_start,
    )


async def build_application(settings: Settings) -> web.Application:
    """Create every service and the aiohttp application around them."""
    doctor_store, ledger = await build_storage(settings)

    directory = DoctorDirectory(doctor_store, strategy=settings.doctor_match_strategy)
    engine = SchedulingEngine(
        directory=directory,
        ledger=ledger,
        slot_generator=build_slot_generator(settings),
    )
    tools = AppointmentTools(engine, directory)

    llm = LLMService(
        provider=build_provider(
            settings.llm_provider,
            gemini_api_key=settings.gemini_api_key,
            gemini_model=settings.gemini_model,
            groq_api_key=settings.groq_api_key,
            groq_model=settings.groq_model,
        ),
        max_tokens=settings.llm_max_tokens,
    )

    orchestrator = DialogueOrchestrator(
        llm_service=llm,
        tools=tools,
        model_timeout_seconds=settings.response_timeout_seconds,
        tool_timeout_seconds=settings.tool_call_timeout_seconds,
        system_prompt_factory=partial(
            get_system_prompt,
            agent_name=settings.agent_name,
            hospital_name=settings.hospital_name,
        ),
    )

    logger.info(
        f"Services initialized: storage={settings.storage_backend}, "
        f"llm={settings.llm_provider.value}, matching={settings.doctor_match_strategy.value}"
    )
    return create_app(orchestrator=orchestrator, tools=tools)


def main():
    """Main entry point."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e.message}")
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level.upper())
    if settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    logger.info(f"Starting API server on {settings.host}:{settings.port} ({settings.environment})")
    # A client that disconnects mid-turn cancels its model and tool calls.
    web.run_app(
        build_application(settings),
        host=settings.host,
        port=settings.port,
        handler_cancellation=True,
    )


if __name__ == "__main__":
    main()
