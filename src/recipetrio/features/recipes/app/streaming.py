from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from recipetrio.features.recipes.app.parser import parse_recipe_response
from recipetrio.features.recipes.app.sanitizer import build_summary, sanitize_detail
from recipetrio.features.recipes.app.use_cases import TextGenerator, persist_detail, with_deadline
from recipetrio.features.recipes.domain.models import PERSONAS, Persona, Recipe, RecipeInput, RecipeStreamChunk
from recipetrio.features.recipes.domain.prompts import build_prompt
from recipetrio.shared.config.settings import settings
from recipetrio.shared.errors import RecipeServiceError, SanitizeRejectedError, UpstreamGenerationError
from recipetrio.shared.llm.ollama_client import SUMMARY_OPTIONS
from recipetrio.shared.persistence.write_queue import WriteQueue, get_write_queue
from recipetrio.shared.utils.id_utils import make_recipe_id

log = logging.getLogger("recipes.stream")

Emit = Callable[[Dict[str, Any]], Awaitable[None]]

MAX_PROGRESS_BEFORE_DONE = 90.0

# Sessions outlive the connection that started them; keep their tasks alive.
_BACKGROUND_TASKS: Set[asyncio.Task] = set()


class PersonaState(str, Enum):
    IDLE = "idle"
    STARTED = "started"
    PROGRESS = "progress"
    COMPLETED = "completed"
    ERROR = "error"


TERMINAL_STATES = {PersonaState.COMPLETED, PersonaState.ERROR}


class InvalidTransitionError(RecipeServiceError):
    def __init__(self, persona: Persona, current: PersonaState, target: PersonaState):
        super().__init__(f"{persona.value}: cannot move from {current.value} to {target.value}")
        self.persona = persona
        self.current = current
        self.target = target


class DuplicateSessionError(RecipeServiceError):
    def __init__(self, request_id: str):
        super().__init__(f"A generation with request_id {request_id!r} is already running")
        self.request_id = request_id


class PersonaStream:
    """
    idle -> started -> progress* -> (completed | error), terminal exactly once.
    """

    def __init__(self, persona: Persona) -> None:
        self.persona = persona
        self.state = PersonaState.IDLE
        self.content = ""
        self.progress = 0.0

    @property
    def terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def _move(self, target: PersonaState, *allowed: PersonaState) -> None:
        if self.state not in allowed:
            raise InvalidTransitionError(self.persona, self.state, target)
        self.state = target

    def start(self) -> RecipeStreamChunk:
        self._move(PersonaState.STARTED, PersonaState.IDLE)
        return RecipeStreamChunk(persona=self.persona, status="started", progress=0)

    def feed(self, fragment: str) -> Optional[RecipeStreamChunk]:
        if not fragment:
            return None
        self._move(PersonaState.PROGRESS, PersonaState.STARTED, PersonaState.PROGRESS)
        self.content += fragment
        self.progress = max(self.progress, min(MAX_PROGRESS_BEFORE_DONE, len(self.content) / 10))
        return RecipeStreamChunk(
            persona=self.persona, status="progress", content=self.content, progress=self.progress
        )

    def complete(self, recipe: Recipe) -> RecipeStreamChunk:
        self._move(PersonaState.COMPLETED, PersonaState.STARTED, PersonaState.PROGRESS)
        self.progress = 100.0
        return RecipeStreamChunk(persona=self.persona, status="completed", recipe=recipe, progress=100)

    def fail(self) -> RecipeStreamChunk:
        self._move(PersonaState.ERROR, PersonaState.IDLE, PersonaState.STARTED, PersonaState.PROGRESS)
        self.progress = 100.0
        return RecipeStreamChunk(persona=self.persona, status="error", progress=100)


class StreamingSession:
    """
    The three persona pipelines of one streaming request.
    """

    def __init__(
        self,
        request_id: str,
        recipe_input: RecipeInput,
        llm: TextGenerator,
        emit: Emit,
        *,
        writer: Optional[WriteQueue] = None,
        deadline_seconds: Optional[float] = None,
    ) -> None:
        self.request_id = request_id
        self.recipe_input = recipe_input
        self.llm = llm
        self.emit = emit
        self.writer = writer or get_write_queue()
        self.deadline_seconds = settings.PERSONA_DEADLINE_SECONDS if deadline_seconds is None else deadline_seconds
        self.streams: Dict[Persona, PersonaStream] = {p: PersonaStream(p) for p in PERSONAS}
        self.completed = False

    async def _send(self, message: Dict[str, Any]) -> None:
        try:
            await self.emit(message)
        except Exception as e:
            log.warning("Dropping event for request_id=%s: %s", self.request_id, e)

    async def _send_chunk(self, chunk: RecipeStreamChunk) -> None:
        await self._send({
            "type": "recipe-chunk",
            "request_id": self.request_id,
            "chunk": chunk.model_dump(mode="json", exclude_none=True),
        })

    async def run(self) -> None:
        log.info("Starting streaming generation request_id=%s", self.request_id)
        await asyncio.gather(*(self._run_persona(i, p) for i, p in enumerate(PERSONAS)))
        self.completed = True
        await self._send({"type": "recipe-complete", "request_id": self.request_id})
        log.info("Streaming generation complete request_id=%s", self.request_id)

    async def _run_persona(self, index: int, persona: Persona) -> None:
        stream = self.streams[persona]
        try:
            await self._generate(index, stream)
        except Exception:
            log.exception("Generation error for %s request_id=%s", persona.value, self.request_id)
            if not stream.terminal:
                await self._send_chunk(stream.fail())

    async def _generate(self, index: int, stream: PersonaStream) -> None:
        persona = stream.persona
        prompt = build_prompt(persona, self.recipe_input)

        async def on_fragment(fragment: str) -> None:
            chunk = stream.feed(fragment)
            if chunk is not None:
                await self._send_chunk(chunk)

        await self._send_chunk(stream.start())
        try:
            await with_deadline(
                self.llm.generate_streaming(prompt, SUMMARY_OPTIONS, on_fragment),
                self.deadline_seconds,
                persona=persona.value,
            )
        except UpstreamGenerationError as e:
            log.error("Generation error for %s request_id=%s: %s", persona.value, self.request_id, e)
            await self._send_chunk(stream.fail())
            return

        recipe_id = make_recipe_id(index)
        draft = parse_recipe_response(stream.content)
        try:
            recipe = build_summary(draft, recipe_id=recipe_id, persona=persona)
        except SanitizeRejectedError as e:
            log.error("Parse error for %s request_id=%s: %s", persona.value, self.request_id, e)
            await self._send_chunk(stream.fail())
            return

        summary_fields = recipe.model_dump(exclude={"id", "persona"}, exclude_none=True)
        detail = sanitize_detail(
            {**draft, **summary_fields}, recipe_id=recipe.id, persona=persona, title=recipe.title
        )
        persist_detail(self.writer, detail)
        await self._send_chunk(stream.complete(recipe))


class SessionCoordinator:
    """
    Per-connection registry of in-flight streaming sessions keyed by the
    caller's request_id. A session leaves the registry once it completes.
    """

    def __init__(
        self,
        llm: TextGenerator,
        emit: Emit,
        *,
        writer: Optional[WriteQueue] = None,
        deadline_seconds: Optional[float] = None,
    ) -> None:
        self.llm = llm
        self.emit = emit
        self.writer = writer
        self.deadline_seconds = deadline_seconds
        self._sessions: Dict[str, StreamingSession] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def active_request_ids(self) -> List[str]:
        return list(self._sessions)

    def start(self, request_id: str, recipe_input: RecipeInput) -> StreamingSession:
        if request_id in self._sessions:
            raise DuplicateSessionError(request_id)
        session = StreamingSession(
            request_id,
            recipe_input,
            self.llm,
            self.emit,
            writer=self.writer,
            deadline_seconds=self.deadline_seconds,
        )
        self._sessions[request_id] = session
        task = asyncio.create_task(self._run(session), name=f"recipe-session-{request_id}")
        self._tasks[request_id] = task
        _BACKGROUND_TASKS.add(task)
        task.add_done_callback(_BACKGROUND_TASKS.discard)
        return session

    async def _run(self, session: StreamingSession) -> None:
        try:
            await session.run()
        finally:
            self._sessions.pop(session.request_id, None)
            self._tasks.pop(session.request_id, None)

    async def wait_idle(self) -> None:
        """Wait until every session started so far has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)
