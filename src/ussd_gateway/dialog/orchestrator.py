"""Dialog orchestrator: one USSD request in, one directive out."""

import logging

from ussd_gateway.automaton.graph import AutomatonGraph, GraphHolder
from ussd_gateway.automaton.models import LogEvent, State, StoreInSession, Transition
from ussd_gateway.automaton.resolver import TransitionResolver
from ussd_gateway.config.settings import GatewaySettings
from ussd_gateway.core.constants import (
    MESSAGE_SEPARATOR,
    MSG_INVALID_OPTION,
    MSG_SESSION_EXPIRED,
    MSG_SYSTEM_ERROR,
    MSG_TOO_MANY_ATTEMPTS,
)
from ussd_gateway.core.errors import (
    NoMatchingTransitionError,
    SessionExpiredError,
    SessionNotFoundError,
    ValidationFailedError,
    create_error_reference,
)
from ussd_gateway.dialog.models import DialogDirective, DialogRequest
from ussd_gateway.hooks.collaborators import UserDirectory
from ussd_gateway.hooks.registry import HookRegistry
from ussd_gateway.observability.logging import ContextLogger, mask_phone
from ussd_gateway.session.models import SessionContext
from ussd_gateway.session.store import SessionStore
from ussd_gateway.validation.registry import ValidatorRegistry

logger = logging.getLogger(__name__)
context_logger = ContextLogger(__name__)


def _prefixed(prefix: str | None, message: str) -> str:
    return f"{prefix}{MESSAGE_SEPARATOR}{message}" if prefix else message


class DialogOrchestrator:
    """Drives a session through the automaton, one request at a time.

    Every request runs under the store's per-session lock, so the load,
    mutate and save steps of two requests for the same session never
    interleave. Recoverable problems (unknown input, failed validation,
    unknown or expired session) produce a CONTINUE directive; anything else
    ends the dialog with a generic apology and leaves the stored session as
    it was.
    """

    def __init__(
        self,
        graphs: GraphHolder,
        store: SessionStore,
        validators: type[ValidatorRegistry] = ValidatorRegistry,
        hooks: HookRegistry | None = None,
        users: UserDirectory | None = None,
        settings: GatewaySettings | None = None,
    ) -> None:
        self.graphs = graphs
        self.store = store
        self.validators = validators
        self.hooks = hooks or HookRegistry()
        self.users = users
        self.settings = settings or GatewaySettings()

    async def handle(self, request: DialogRequest) -> DialogDirective:
        """Process one request.

        Args:
            request: Session id, caller and the latest input token

        Returns:
            The directive to send back to the aggregator
        """
        try:
            async with self.store.lock(request.session_id):
                return await self._handle_locked(request)
        except Exception as e:
            error_ref = create_error_reference()
            logger.error(
                f"[{error_ref}] Dialog step failed for {mask_phone(request.phone_number)}: "
                f"{type(e).__name__}: {e}",
                exc_info=True,
                extra={
                    "error_reference": error_ref,
                    "session_id": request.session_id,
                    "exception_type": type(e).__name__,
                },
            )
            return DialogDirective.end(MSG_SYSTEM_ERROR)

    async def cancel(self, session_id: str) -> bool:
        """End a session on request of the user or the aggregator.

        Returns:
            True if a live session was removed
        """
        async with self.store.lock(session_id):
            existed = await self.store.exists(session_id)
            await self.store.delete(session_id)
        if existed:
            logger.info("Session cancelled", extra={"session_id": session_id})
        return existed

    async def _handle_locked(self, request: DialogRequest) -> DialogDirective:
        graph = self.graphs.current
        try:
            session = await self.store.get(request.session_id)
        except SessionNotFoundError:
            return await self._start(graph, request)
        except SessionExpiredError:
            return await self._start(graph, request, notice=MSG_SESSION_EXPIRED)

        if session.current_state_id is None:
            return await self._start(graph, request)
        if not graph.has_state(session.current_state_id):
            logger.warning(
                f"State {session.current_state_id} no longer exists, restarting dialog",
                extra={"session_id": session.session_id},
            )
            return await self._start(graph, request)

        return await self._continue(graph, session, request.raw_input)

    # ------------------------------------------------------------------
    # New session
    # ------------------------------------------------------------------

    async def _start(
        self,
        graph: AutomatonGraph,
        request: DialogRequest,
        notice: str | None = None,
    ) -> DialogDirective:
        session_id = await self.store.create(request.phone_number, request.session_id)
        session = await self.store.get(session_id)
        initial = graph.initial_state
        session.move_to(initial.state_id)
        await self._identify_caller(session)

        logger.info(
            f"New session for {mask_phone(request.phone_number)} at {initial.state_id}",
            extra={"session_id": session_id, "state_id": initial.state_id},
        )

        message = _prefixed(notice, initial.render(session.guard_context()))
        if initial.ends_dialog:
            await self.store.delete(session_id)
            return DialogDirective.end(message)
        await self.store.save(session)
        return DialogDirective.cont(message)

    async def _identify_caller(self, session: SessionContext) -> None:
        """Attach the registered user, if any. Unknown callers are fine."""
        if self.users is None:
            return
        try:
            user = await self.users.find_by_phone(session.phone_number)
        except Exception as e:
            logger.warning(
                f"User lookup failed for {mask_phone(session.phone_number)}: {e}",
                extra={"session_id": session.session_id},
            )
            return
        if user is not None:
            session.user_id = user.user_id
            session.authenticated = True

    # ------------------------------------------------------------------
    # Existing session
    # ------------------------------------------------------------------

    async def _continue(
        self,
        graph: AutomatonGraph,
        session: SessionContext,
        raw_input: str,
    ) -> DialogDirective:
        state = graph.get_state(session.current_state_id)
        resolver = TransitionResolver(graph)

        try:
            transition = self._select(resolver, state, session, raw_input)
        except NoMatchingTransitionError:
            return await self._reject(
                graph, resolver, session, state, raw_input, MSG_INVALID_OPTION,
                self.settings.max_retries,
            )
        except ValidationFailedError as e:
            logger.debug(
                f"Validation {e.tag} failed: {e.reason}",
                extra={"session_id": session.session_id, "state_id": state.state_id},
            )
            return await self._reject(
                graph, resolver, session, state, raw_input,
                e.reason or MSG_INVALID_OPTION, e.max_retries,
            )

        if transition.is_fallback:
            attempts = session.register_failure()
            if attempts >= self.settings.max_retries:
                return await self._exhausted(graph, resolver, session, state, raw_input, attempts)
            return await self._follow(graph, session, state, transition, raw_input, accepted=False)

        return await self._follow(graph, session, state, transition, raw_input, accepted=True)

    def _select(
        self,
        resolver: TransitionResolver,
        state: State,
        session: SessionContext,
        raw_input: str,
    ) -> Transition:
        """Resolve the transition for ``raw_input`` and validate the input.

        Raises:
            NoMatchingTransitionError: No regular or fallback transition matches
            ValidationFailedError: The matched transition rejects the input
        """
        transition = resolver.resolve(state.state_id, raw_input, session)
        if transition is None:
            raise NoMatchingTransitionError(state.state_id, raw_input)

        if transition.requires_validation:
            tag = transition.validation_type or state.validation_type
            result = self.validators.validate(tag, raw_input)
            if not result.ok:
                raise ValidationFailedError(
                    result.reason or MSG_INVALID_OPTION,
                    tag=tag,
                    max_retries=transition.max_retries,
                )
        return transition

    async def _reject(
        self,
        graph: AutomatonGraph,
        resolver: TransitionResolver,
        session: SessionContext,
        state: State,
        raw_input: str,
        reason: str,
        max_retries: int,
    ) -> DialogDirective:
        """Count a failed attempt and re-prompt until the retry limit is reached."""
        attempts = session.register_failure()
        if attempts >= max_retries:
            return await self._exhausted(graph, resolver, session, state, raw_input, attempts)

        await self.store.save(session)
        return DialogDirective.cont(_prefixed(reason, state.render(session.guard_context())))

    async def _exhausted(
        self,
        graph: AutomatonGraph,
        resolver: TransitionResolver,
        session: SessionContext,
        state: State,
        raw_input: str,
        attempts: int,
    ) -> DialogDirective:
        """Leave a state whose retry limit is reached.

        The error transition wins, then a fallback that leads to another
        state. With neither, the dialog ends.
        """
        log = context_logger.with_context(session_id=session.session_id, state_id=state.state_id)
        escape = resolver.error_transition(state.state_id, session)
        if escape is None:
            fallback = resolver.fallback_transition(state.state_id, session)
            if fallback is not None and fallback.to_state_id != state.state_id:
                escape = fallback

        if escape is not None:
            log.info(f"Retry limit reached after {attempts} attempt(s), following {escape}")
            session.reset_retries()
            return await self._follow(graph, session, state, escape, raw_input, accepted=False)

        log.info(f"Retry limit reached after {attempts} attempt(s), ending dialog")
        await self.store.delete(session.session_id)
        return DialogDirective.end(MSG_TOO_MANY_ATTEMPTS)

    async def _follow(
        self,
        graph: AutomatonGraph,
        session: SessionContext,
        state: State,
        transition: Transition,
        raw_input: str,
        accepted: bool,
    ) -> DialogDirective:
        """Take a transition and respond with the landed state.

        ``accepted`` is False for fallback and error transitions. Neither the
        input nor ``StoreInSession`` values are recorded for them, and the
        transition's error message is shown above the landed state's prompt.
        """
        log = context_logger.with_context(
            session_id=session.session_id, state_id=transition.to_state_id
        )
        self._apply_actions(transition, session, raw_input, accepted)

        prefix = None
        if accepted:
            if state.storage_key:
                session.store_answer(state.storage_key, raw_input.strip())
            session.reset_retries()
        else:
            prefix = transition.error_message
            if transition.is_error:
                session.reset_retries()

        session.move_to(transition.to_state_id)
        landed = graph.get_state(transition.to_state_id)
        log.debug(f"Followed {transition}")

        if landed.business_hook:
            produced = await self.hooks.execute(landed.business_hook, session.guard_context())
            session.merge_answers(produced)
            log.debug(f"Hook {landed.business_hook} produced {sorted(produced)}")

        message = _prefixed(prefix, landed.render(session.guard_context()))
        if landed.ends_dialog or graph.is_final(landed.state_id):
            await self.store.delete(session.session_id)
            log.info(f"Dialog ended at {landed.state_id}")
            return DialogDirective.end(message)

        await self.store.save(session)
        return DialogDirective.cont(message)

    def _apply_actions(
        self,
        transition: Transition,
        session: SessionContext,
        raw_input: str,
        accepted: bool = True,
    ) -> None:
        for action in transition.actions:
            if isinstance(action, StoreInSession) and accepted:
                session.merge_answers({action.key: action.resolve_value(raw_input, session.answers)})
            elif isinstance(action, LogEvent):
                logger.info(
                    f"Dialog event: {action.name}",
                    extra={
                        "event": action.name,
                        "session_id": session.session_id,
                        "state_id": transition.from_state_id,
                    },
                )
