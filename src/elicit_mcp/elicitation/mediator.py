"""
Elicitation mediator: runs one elicitation/create exchange and normalizes the outcome
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import ValidationError

from ..exceptions import ProtocolViolationError, SchemaViolationError
from .contracts import AnswerExtractor, ReplyContract, ReplyT
from .schemas import (
    ElicitationAction,
    ElicitationRequest,
    FieldSpecification,
    MediationResult,
)

logger = logging.getLogger(__name__)

RequestSender = Callable[[str, dict[str, Any]], Awaitable[Any]]


class ElicitationMediator:
    """
    Sends a single elicitation request and turns the client's reply into a
    :class:`MediationResult`.

    The mediator holds no per-call state, so one instance can serve any
    number of concurrent tool calls.
    """

    def __init__(self, send_request: RequestSender) -> None:
        self._send_request = send_request

    async def mediate(
        self,
        message: str,
        field_spec: FieldSpecification,
        reply_model: type[ReplyT],
        extractor: AnswerExtractor[ReplyT],
    ) -> MediationResult:
        """
        Ask the user for a single answer.

        Args:
            message: Prompt shown to the user, may be empty
            field_spec: Requested schema describing the answer
            reply_model: pydantic model the reply content must satisfy
            extractor: Maps a validated reply to the answer, or None

        Raises:
            SchemaViolationError: Accepted reply content has the wrong shape
            ProtocolViolationError: Reply is malformed or has an unknown action
        """
        request = ElicitationRequest(message=message, requested_schema=field_spec)
        logger.debug(f"Sending elicitation request: {message!r}")
        reply = await self._send_request(request.method, request.to_params())

        if not isinstance(reply, Mapping):
            raise ProtocolViolationError(
                f"elicitation reply must be an object, got {type(reply).__name__}"
            )

        action = reply.get("action")
        if action == ElicitationAction.ACCEPT.value:
            result = self._accept(reply.get("content"), reply_model, extractor)
        elif action == ElicitationAction.DECLINE.value:
            result = MediationResult.refused(ElicitationAction.DECLINE)
        elif action == ElicitationAction.CANCEL.value:
            result = MediationResult.refused(ElicitationAction.CANCEL)
        else:
            raise ProtocolViolationError(f"unknown elicitation action: {action}")

        logger.info(f"Elicitation '{message}' finished as {result.state.value}")
        return result

    async def mediate_contract(
        self,
        message: str,
        field_spec: FieldSpecification,
        contract: ReplyContract[ReplyT],
    ) -> MediationResult:
        return await self.mediate(
            message, field_spec, contract.reply_model, contract.extractor
        )

    def _accept(
        self,
        content: Any,
        reply_model: type[ReplyT],
        extractor: AnswerExtractor[ReplyT],
    ) -> MediationResult:
        if content is None:
            return MediationResult.unanswered()

        try:
            validated = reply_model.model_validate(content)
        except ValidationError as e:
            logger.warning(f"Elicitation reply failed validation: {e}")
            raise SchemaViolationError(
                f"elicitation reply does not match the expected shape: {e}",
                diagnostics=e.errors(include_url=False, include_context=False),
            ) from e

        answer = extractor(validated)
        if not answer:
            return MediationResult.unanswered()
        return MediationResult.answered(answer)
