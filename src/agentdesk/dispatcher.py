"""Hand a selected agent's instructions and a task to an execution backend.

The backend is an external LLM invocation service. This module only builds the
request, enforces the caller's time budget and retries unreachable backends a
bounded number of times; whatever the backend answers is returned untouched.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol, Union

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from common import Settings

from .agents.base import INHERIT_MODEL, AgentDefinition, DispatchRecord, MatchResult
from .agents.errors import BackendUnavailableError
from .agents.registry import AgentRegistry


logger = logging.getLogger(__name__)

Target = Union[MatchResult, AgentDefinition, str]


@dataclass(frozen=True)
class DispatchRequest:
    """Prompt material sent to the backend for a single task."""

    agent_name: str
    model: str
    instructions: str
    task: str
    context: Mapping[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "agent": self.agent_name,
            "model": self.model,
            "system": self.instructions,
            "input": self.task,
            "context": dict(self.context),
        }


class Backend(Protocol):
    """Protocol describing an execution backend."""

    def invoke(self, request: DispatchRequest, *, timeout: float) -> str:
        """Run the request and return the raw response text."""


class HttpBackend:
    """POST dispatch requests as JSON to an HTTP endpoint."""

    def __init__(
        self,
        url: str,
        *,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.session = session
        self.label = url

    def invoke(self, request: DispatchRequest, *, timeout: float) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        post = self.session.post if self.session is not None else requests.post
        try:
            resp = post(self.url, json=request.to_payload(), headers=headers, timeout=timeout)
        except requests.RequestException as exc:
            raise BackendUnavailableError(f"Backend at {self.url} unreachable: {exc}") from exc
        if not resp.ok:
            raise BackendUnavailableError(
                f"Backend at {self.url} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.text


@dataclass(slots=True)
class EchoBackend:
    """Offline backend that reflects the request back for dry runs."""

    prefix: str = "DRY-RUN"
    label: str = "echo"

    def invoke(self, request: DispatchRequest, *, timeout: float) -> str:
        lines = [
            f"[{self.prefix}] agent={request.agent_name} model={request.model}",
            f"Task: {request.task.strip()}",
        ]
        if request.context:
            lines.append(f"Context: {json.dumps(dict(request.context), sort_keys=True)}")
        lines.append(f"Instructions: {len(request.instructions)} characters")
        return "\n".join(lines)


class Dispatcher:
    """Bind agent instructions to a task and forward them to a backend."""

    def __init__(
        self,
        registry: AgentRegistry,
        backend: Backend,
        *,
        default_model: str = "default",
        timeout: float = 60.0,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        backoff_max: float = 8.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be zero or greater.")
        self.registry = registry
        self.backend = backend
        self.default_model = default_model
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        registry: AgentRegistry,
        settings: Settings,
        backend: Optional[Backend] = None,
    ) -> "Dispatcher":
        """Build a dispatcher, choosing the HTTP backend when a URL is configured."""
        if backend is None:
            if settings.backend_url:
                backend = HttpBackend(settings.backend_url, api_key=settings.backend_api_key)
            else:
                logger.info("No backend URL configured; using the dry-run echo backend")
                backend = EchoBackend()
        return cls(
            registry,
            backend,
            default_model=settings.default_model,
            timeout=settings.timeout_s,
            max_retries=settings.max_retries,
            backoff_base=settings.backoff_base_s,
            backoff_max=settings.backoff_max_s,
        )

    def build_request(
        self,
        target: Target,
        task: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> DispatchRequest:
        """Resolve ``target`` and assemble the backend request."""
        if not task or not task.strip():
            raise ValueError("Task must be a non-empty string.")
        agent = self._resolve(target)
        model = agent.model_hint
        if not model or model.lower() == INHERIT_MODEL:
            model = self.default_model
        return DispatchRequest(
            agent_name=agent.name,
            model=model,
            instructions=agent.instructions,
            task=task,
            context=dict(context or {}),
        )

    def dispatch(
        self,
        target: Target,
        task: str,
        context: Optional[Mapping[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        """Send ``task`` to the backend as ``target`` and return the raw response."""
        request = self.build_request(target, task, context)
        return self._send(request, timeout)

    def dispatch_record(
        self,
        target: Target,
        task: str,
        context: Optional[Mapping[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> DispatchRecord:
        """Dispatch like :meth:`dispatch` and describe the exchange for transcripts."""
        request = self.build_request(target, task, context)
        started = self._clock()
        response = self._send(request, timeout)
        score = target.score if isinstance(target, MatchResult) else None
        return DispatchRecord(
            agent_name=request.agent_name,
            request=request.task,
            response=response,
            model=request.model,
            context=dict(request.context),
            selection="matched" if score is not None else "explicit",
            score=score,
            backend=backend_label(self.backend),
            elapsed_s=round(self._clock() - started, 3),
        )

    def _send(self, request: DispatchRequest, timeout: Optional[float]) -> str:
        budget = self.timeout if timeout is None else timeout
        deadline = self._clock() + budget

        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1) | self._deadline_reached(deadline),
            wait=self._bounded_wait(deadline),
            retry=retry_if_exception_type(BackendUnavailableError),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        logger.info("Dispatching task to agent %s (model=%s)", request.agent_name, request.model)
        response = retrying(self._invoke, request, deadline)
        logger.info("Agent %s responded with %d characters", request.agent_name, len(response))
        return response

    def _deadline_reached(self, deadline: float) -> Callable[[RetryCallState], bool]:
        def stop(retry_state: RetryCallState) -> bool:
            return self._clock() >= deadline

        return stop

    def _bounded_wait(self, deadline: float) -> Callable[[RetryCallState], float]:
        backoff = wait_exponential(multiplier=self.backoff_base, max=self.backoff_max)

        def wait(retry_state: RetryCallState) -> float:
            # Never sleep past the caller's deadline.
            return min(backoff(retry_state), max(deadline - self._clock(), 0.0))

        return wait

    def _invoke(self, request: DispatchRequest, deadline: float) -> str:
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise BackendUnavailableError(f"Dispatch to '{request.agent_name}' timed out.")
        return self.backend.invoke(request, timeout=remaining)

    def _resolve(self, target: Target) -> AgentDefinition:
        if isinstance(target, MatchResult):
            return target.agent
        if isinstance(target, AgentDefinition):
            return target
        return self.registry.get(target)


def backend_label(backend: Backend) -> str:
    """Short human-readable name of a backend for logs and transcripts."""
    label = getattr(backend, "label", None)
    return label if isinstance(label, str) and label else type(backend).__name__
