"""Services package: scheduling, storage and model access."""

from .directory import DoctorDirectory
from .ledger import AppointmentLedger, DoctorStore
from .llm_service import LLMService, build_provider, get_system_prompt
from .matching import MatchStrategy
from .memory_store import MemoryDoctorStore, MemoryLedger
from .orchestrator import DialogueOrchestrator, TurnResult, TurnState
from .scheduling import SchedulingEngine
from .slot_generator import SlotGenerator, parse_break
from .supabase_service import SupabaseDoctorStore, SupabaseLedger, create_supabase_client

__all__ = [
    "DoctorDirectory",
    "AppointmentLedger",
    "DoctorStore",
    "LLMService",
    "build_provider",
    "get_system_prompt",
    "MatchStrategy",
    "MemoryDoctorStore",
    "MemoryLedger",
    "DialogueOrchestrator",
    "TurnResult",
    "TurnState",
    "SchedulingEngine",
    "SlotGenerator",
    "parse_break",
    "SupabaseDoctorStore",
    "SupabaseLedger",
    "create_supabase_client",
]
