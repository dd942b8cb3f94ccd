"""Conversation orchestration: cache-or-network exchange and tool-call loop.

One turn runs as follows:

1. Fragments are normalized into a ConversationState.
2. Options are resolved and the request body is built.
3. The request is fingerprinted; a cached response is used if present,
   otherwise the provider is asked and the response is cached.
4. Every choice with ``finish_reason == "tool_calls"`` has its calls run in
   order. A StopSignal ends the turn at once and is returned to the caller.
5. If any call produced a result, the assistant message and the tool
   results are appended and the exchange repeats with the longer history.
   Otherwise the response is the TerminalAnswer.

Tool calls always run one at a time, in the order the provider listed them.
"""

import json
import logging
from typing import TYPE_CHECKING, Any

from tool_relay.cache import ResponseCache, fingerprint
from tool_relay.conversation.errors import ToolExecutionError, UnknownToolError
from tool_relay.conversation.fragments import normalize, normalize_message
from tool_relay.conversation.request import build_request
from tool_relay.conversation.types import ChatOptions, ConversationState, TerminalAnswer
from tool_relay.llm import ChatCompletion, ChatCompletionsClient
from tool_relay.tools.signals import StopSignal

if TYPE_CHECKING:
    from tool_relay.config import ToolRelaySettings

logger = logging.getLogger(__name__)

TOOL_CALLS_FINISH_REASON = "tool_calls"


def tool_result_message(call: dict[str, Any], result: Any) -> dict[str, Any]:
    """Build the tool-result message answering one tool call.

    Strings are sent verbatim; anything else is JSON-encoded.
    """
    if isinstance(result, str):
        content = result
    else:
        content = json.dumps(result, ensure_ascii=False, default=str)
    return normalize_message(
        {
            "role": "tool",
            "content": content,
            "tool_call_id": call.get("id"),
            "index": call.get("index"),
        }
    )


def _decode_arguments(tool_id: str, raw: Any) -> dict[str, Any]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        arguments = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise ToolExecutionError(tool_id, f"invalid arguments: {e}") from e
    if not isinstance(arguments, dict):
        raise ToolExecutionError(
            tool_id, f"arguments must be a JSON object, got {type(arguments).__name__}"
        )
    return arguments


def _preview(text: Any, limit: int = 100) -> str:
    text = text if isinstance(text, str) else json.dumps(text, ensure_ascii=False)
    return f"{text[:limit]}..." if len(text) > limit else text


class ChatOrchestrator:
    """Runs conversations against a chat-completion provider.

    The orchestrator holds no per-conversation state; every ``converse`` call
    is independent apart from the shared response cache.

    Attributes:
        client: Provider client
        cache: Response cache, or None to always ask the provider
        defaults: Options every conversation starts from
        chat_model: Model for plain chat
        tools_model: Model for requests that offer tools
    """

    def __init__(
        self,
        client: ChatCompletionsClient,
        cache: ResponseCache | None = None,
        defaults: ChatOptions | None = None,
        chat_model: str = "qwen-plus",
        tools_model: str | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.defaults = defaults or ChatOptions()
        self.chat_model = chat_model
        self.tools_model = tools_model

    @classmethod
    def from_settings(
        cls,
        settings: "ToolRelaySettings",
        client: ChatCompletionsClient,
        cache: ResponseCache | None = None,
    ) -> "ChatOrchestrator":
        return cls(
            client=client,
            cache=cache,
            defaults=ChatOptions.from_settings(settings),
            chat_model=settings.chat_model,
            tools_model=settings.resolved_tools_model,
        )

    async def converse(self, *fragments: Any) -> TerminalAnswer | StopSignal:
        """Run one conversation turn to completion.

        Args:
            *fragments: Conversation fragments (messages, capabilities,
                options, earlier answers, ...)

        Returns:
            The final answer, or the StopSignal a capability returned

        Raises:
            ValueError: If the fragments contain no messages
            ProviderError: If the provider reports an error
            UnknownToolError: If the model calls a tool that was not offered
            ToolExecutionError: If a capability fails
        """
        state = await normalize(*fragments)
        return await self.resolve(state)

    async def resolve(self, state: ConversationState) -> TerminalAnswer | StopSignal:
        """Run the exchange and tool-call loop from an already normalized state."""
        while True:
            options = self.defaults.merged(state.overrides)
            body = build_request(state, options, self.chat_model, self.tools_model)
            key = fingerprint(
                body["messages"],
                body.get("tools", []),
                options.fingerprint_fields(),
                body["model"],
            )

            response, cached = await self._exchange(key, body)

            outcome = await self._run_tool_calls(response, state, options)
            if isinstance(outcome, StopSignal):
                logger.info(f"Conversation stopped by a capability ({outcome.kind.value})")
                return outcome
            if not outcome:
                return TerminalAnswer(
                    choices=list(response.get("choices") or []),
                    state=state,
                    fingerprint=key,
                    cached=cached,
                )

            state = state.extended(outcome)
            logger.debug(f"Continuing with {len(state.messages)} messages")

    async def _exchange(
        self, key: str, body: dict[str, Any]
    ) -> tuple[ChatCompletion, bool]:
        if self.cache is not None:
            entry = await self.cache.get(key)
            if entry is not None:
                logger.info(f"Cache hit {key}")
                return entry.response, True  # type: ignore[return-value]

        last = body["messages"][-1].get("content")
        logger.info(f"Asking {body['model']}: {_preview(last)}")
        response = await self.client.create(body)

        # Written before any tool runs
        if self.cache is not None:
            await self.cache.put(key, body, dict(response))
        return response, False

    async def _run_tool_calls(
        self,
        response: ChatCompletion,
        state: ConversationState,
        options: ChatOptions,
    ) -> StopSignal | list[dict[str, Any]]:
        """Run every requested call.

        Returns:
            A StopSignal, or the messages to append (empty when nothing
            produced a result)
        """
        appended: list[dict[str, Any]] = []

        for choice in response.get("choices") or []:
            if choice.get("finish_reason") != TOOL_CALLS_FINISH_REASON:
                continue
            message = choice.get("message") or {}
            answered: list[dict[str, Any]] = []
            results: list[dict[str, Any]] = []

            for call in message.get("tool_calls") or []:
                result = await self._invoke(call, state, options, response)
                if isinstance(result, StopSignal):
                    return result
                if result is None:
                    continue
                answered.append(call)
                results.append(tool_result_message(call, result))

            if results:
                appended.append(
                    normalize_message(
                        {"role": "assistant", **message, "tool_calls": answered}
                    )
                )
                appended.extend(results)

        return appended

    async def _invoke(
        self,
        call: dict[str, Any],
        state: ConversationState,
        options: ChatOptions,
        response: ChatCompletion,
    ) -> Any:
        function = call.get("function") or {}
        tool_id = function.get("name") or ""
        invocation = state.invocations.get(tool_id)
        if invocation is None:
            logger.error(f"Model called unknown tool '{tool_id}'")
            raise UnknownToolError(tool_id)

        arguments = _decode_arguments(tool_id, function.get("arguments"))
        logger.info(f"Calling {invocation.callable_name} from {invocation.source_path}")

        try:
            return await invocation.call(arguments, shared=options.shared, chain=response)
        except Exception as e:
            logger.error(f"Capability {invocation.callable_name} failed: {e}")
            raise ToolExecutionError(tool_id, str(e)) from e
