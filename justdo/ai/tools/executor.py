"""
Tool executor: runs one model-issued tool call end to end.

execute() validates the arguments, runs the guardrail for mutating chat
calls, dispatches to the handler and converts every exception into a failed
ToolResult. Mutating handlers resolve stale paths from the conversation,
verify the storage result and attach a MutationReceipt.
"""

from __future__ import annotations

import logging
from typing import Any

from ...config import settings
from ...constants import (
    ACTIVE_LIKE_STATUSES,
    INBOX_CATEGORY,
    MUTATING_TOOLS,
    category_of_path,
    canonical_category,
    is_task_category,
)
from ...exceptions import (
    ClassificationError,
    IntentAnalysisError,
    ServiceUnavailableError,
    StorageError,
    ToolGuardrailError,
    is_not_found,
)
from ...models import (
    BodyContentUpdate,
    CaptureResult,
    ClassificationInput,
    ContextWindow,
    DeleteEntryResult,
    DigestResult,
    DuplicateResult,
    Entry,
    GetEntryResult,
    ListEntriesResult,
    MergeEntriesResult,
    MoveEntryResult,
    SearchResult,
    ToolCall,
    ToolExecutionOptions,
    ToolResult,
    UpdateEntryResult,
    UpdateIntentAnalysis,
)
from ...utils.text_heuristics import (
    extract_person_names,
    has_status_request,
    infer_title_and_note,
    suggests_reopen,
)
from ..prompts import CLASSIFICATION_SYSTEM_PROMPT
from .capture import apply_actions, build_entry_fields, inbox_fields
from .registry import ToolRegistry
from .resolution import ResolvedTarget, TargetResolver
from .routing import build_agent_note, route_category
from .verification import build_receipt, verify_delete, verify_move, verify_update

logger = logging.getLogger(__name__)

QUEUED_MESSAGE = "Capture queued and will be processed when the LLM is available."
STATUS_NOT_REQUESTED = "Status update ignored because the user did not request a status change."
STATUS_NO_CONTEXT = "Status update ignored because no user message context was available."
INTENT_UNAVAILABLE = "Intent analysis unavailable; used heuristic parsing for update intent."


class ToolExecutor:
    """
    Dispatches tool calls to handlers backed by the injected collaborators.

    Only entry_store, search_index and classification_agent are required.
    Without a guardrail the guardrail step is skipped; without intent
    analysis the text heuristics are used; without action extraction,
    linking, a queue, digests or duplicate detection those features are off.
    """

    def __init__(
        self,
        *,
        entry_store,
        search_index,
        classification_agent,
        registry: ToolRegistry | None = None,
        index_provider=None,
        guardrail=None,
        intent_analysis=None,
        action_extraction=None,
        entry_linker=None,
        capture_queue=None,
        digest_generator=None,
        duplicate_finder=None,
        resolver: TargetResolver | None = None,
        confidence_threshold: float | None = None,
        guardrail_enabled: bool | None = None,
        guardrail_context_turns: int | None = None,
        tz_name: str | None = None,
    ) -> None:
        self._store = entry_store
        self._search = search_index
        self._classifier = classification_agent
        self._registry = registry or ToolRegistry()
        self._index = index_provider
        self._guardrail = guardrail
        self._intent = intent_analysis
        self._actions = action_extraction
        self._linker = entry_linker
        self._queue = capture_queue
        self._digests = digest_generator
        self._duplicates = duplicate_finder
        self._resolver = resolver or TargetResolver(search_index=search_index, entry_store=entry_store)
        self._threshold = (
            confidence_threshold if confidence_threshold is not None else settings.confidence_threshold
        )
        self._guardrail_enabled = (
            guardrail_enabled if guardrail_enabled is not None else settings.guardrail_enabled
        )
        self._context_turns = guardrail_context_turns or settings.guardrail_context_turns
        self._tz_name = tz_name

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def execute(self, call: ToolCall, options: ToolExecutionOptions | None = None) -> ToolResult:
        """
        Execute a tool call. Never raises: every failure is a ToolResult
        with success=False and a message in error.
        """
        options = options or ToolExecutionOptions()
        name = call.name
        args = call.arguments

        validation = self._registry.validate_arguments(name, args)
        if not validation.valid:
            return ToolResult(success=False, error=f"Invalid arguments: {', '.join(validation.errors)}")

        logger.info(
            "Executing tool %s", name,
            extra={"tool": name, "channel": options.channel},
        )
        try:
            blocked = await self._check_guardrail(name, args, options)
            if blocked is not None:
                return blocked

            match name:
                # Capture
                case "classify_and_capture":
                    return await self._classify_and_capture(args, options)

                # Read
                case "list_entries":
                    return await self._list_entries(args)
                case "get_entry":
                    return await self._get_entry(args)
                case "search_entries":
                    return await self._search_entries(args)
                case "find_duplicates":
                    return await self._find_duplicates(args)
                case "generate_digest":
                    return await self._generate_digest(args)

                # Mutate
                case "update_entry":
                    return await self._update_entry(args, options)
                case "move_entry":
                    return await self._move_entry(args, options)
                case "delete_entry":
                    return await self._delete_entry(args, options)
                case "merge_entries":
                    return await self._merge_entries(args, options)

                case _:
                    return ToolResult(success=False, error=f"Unknown tool: {name}")

        except Exception as exc:
            logger.error(
                "Tool %s failed: %s", name, exc,
                exc_info=True, extra={"tool": name, "channel": options.channel},
            )
            return ToolResult(success=False, error=str(exc) or type(exc).__name__)

    # ------------------------------------------------------------------ #
    # Guardrail                                                            #
    # ------------------------------------------------------------------ #

    def _guardrail_transcript(self, context: ContextWindow, latest: str) -> str:
        turns = context.recent_turns(self._context_turns)
        # latest is already the header
        if turns and turns[-1].role == "user" and turns[-1].content == latest:
            turns = turns[:-1]
        if not turns:
            return latest
        lines = [f"{'User' if m.role == 'user' else 'Assistant'}: {m.content}" for m in turns]
        return f"{latest}\n\nRecent conversation:\n" + "\n".join(lines)

    async def _check_guardrail(
        self, name: str, args: dict, options: ToolExecutionOptions
    ) -> ToolResult | None:
        if name not in MUTATING_TOOLS or options.channel != "chat":
            return None
        if self._guardrail is None or not self._guardrail_enabled or options.context is None:
            return None
        latest = options.context.last_user_message()
        if not latest:
            return None

        try:
            decision = await self._guardrail.validate_tool_call(
                name, args, self._guardrail_transcript(options.context, latest)
            )
        except ToolGuardrailError as exc:
            logger.warning("Guardrail unavailable for %s, blocking: %s", name, exc)
            return ToolResult(success=False, error=f"Tool call blocked: guardrail check failed ({exc})")

        if not decision.allowed:
            reason = decision.reason or "request does not match user intent"
            logger.warning("Guardrail blocked %s: %s", name, reason)
            return ToolResult(success=False, error=f"Tool call blocked by guardrail: {reason}")
        return None

    # ------------------------------------------------------------------ #
    # Capture                                                              #
    # ------------------------------------------------------------------ #

    async def _default_context(self) -> ContextWindow:
        index_content = await self._index.get_index_content() if self._index else ""
        return ContextWindow(system_prompt=CLASSIFICATION_SYSTEM_PROMPT, index_content=index_content)

    async def _classify_and_capture(self, args: dict, options: ToolExecutionOptions) -> ToolResult:
        text: str = args["text"]
        hints: str | None = args.get("hints")
        channel = options.channel
        context = options.context or await self._default_context()

        try:
            result = await self._classifier.classify(
                ClassificationInput(text=text, hints=hints, context=context)
            )
        except ClassificationError as exc:
            if exc.transient and options.allow_queue and self._queue is not None and self._queue.is_enabled():
                queued = await self._queue.enqueue_capture(text, hints, channel, context)
                if queued is not None:
                    logger.info("Classification unavailable (%s); queued capture %s", exc.kind.value, queued.id)
                    return ToolResult(success=True, data=CaptureResult(
                        category=INBOX_CATEGORY,
                        queued=True,
                        queue_id=queued.id,
                        message=QUEUED_MESSAGE,
                    ))
            raise

        category = route_category(result.confidence, result.category, self._threshold)
        warnings: list[str] = []

        if category == INBOX_CATEGORY:
            entry = await self._store.create(
                INBOX_CATEGORY,
                inbox_fields(result, text, channel),
                channel,
                build_agent_note(result.confidence, result.reasoning),
            )
        else:
            fields = build_entry_fields(result, channel, text, tz_name=self._tz_name or settings.timezone)
            body = result.body_content
            if self._actions is not None and category in ("projects", "task"):
                extracted = await self._actions.extract_actions(text, category)
                fields, body = apply_actions(category, fields, body, extracted)
            entry = await self._store.create(category, fields, channel, body or None)
            await self._link_after_capture(entry, fields, channel, warnings)

        return ToolResult(success=True, data=CaptureResult(
            path=entry.path,
            category=category,
            name=result.name,
            confidence=result.confidence,
            clarification_needed=category == INBOX_CATEGORY,
            warnings=warnings,
        ))

    async def _link_after_capture(
        self, entry: Entry, fields: dict[str, Any], channel, warnings: list[str]
    ) -> None:
        if self._linker is None:
            return
        try:
            people = fields.get("related_people") or []
            projects = fields.get("related_projects") or []
            if people and entry.category in ("task", "projects"):
                await self._linker.link_people_for_entry(entry, people, channel)
            if projects and entry.category in ("people", "ideas"):
                await self._linker.link_projects_for_entry(entry, projects, channel, create_missing=False)
        except Exception as exc:
            logger.warning("Linking failed for %s: %s", entry.path, exc)
            warnings.append(f"Related entries could not be linked: {exc}")

    # ------------------------------------------------------------------ #
    # Read                                                                 #
    # ------------------------------------------------------------------ #

    async def _list_entries(self, args: dict) -> ToolResult:
        status = args.get("status")
        limit = int(args.get("limit") or 10)
        entries = await self._store.list(args.get("category"), {"status": status} if status else None)
        return ToolResult(success=True, data=ListEntriesResult(entries=entries[:limit], total=len(entries)))

    async def _get_entry(self, args: dict) -> ToolResult:
        entry = await self._store.read(args["path"])
        return ToolResult(success=True, data=GetEntryResult(entry=entry))

    async def _search_entries(self, args: dict) -> ToolResult:
        limit = args.get("limit")
        response = await self._search.search(
            args["query"], args.get("category"), int(limit) if limit is not None else None
        )
        return ToolResult(success=True, data=SearchResult(entries=response.entries, total=response.total))

    async def _find_duplicates(self, args: dict) -> ToolResult:
        if self._duplicates is None:
            raise ServiceUnavailableError("Duplicate detection is not configured")
        duplicates = await self._duplicates.find_duplicates_for_text(
            args.get("name"),
            args.get("text"),
            args.get("category"),
            int(args.get("limit") or 5),
            args.get("excludePath"),
        )
        return ToolResult(success=True, data=DuplicateResult(duplicates=duplicates))

    async def _generate_digest(self, args: dict) -> ToolResult:
        if self._digests is None:
            raise ServiceUnavailableError("Digest generation is not configured")
        digest_type = args["type"]
        if digest_type == "daily":
            content = await self._digests.generate_daily_digest()
        else:
            content = await self._digests.generate_weekly_review()
        return ToolResult(success=True, data=DigestResult(type=digest_type, content=content))

    # ------------------------------------------------------------------ #
    # Mutate                                                               #
    # ------------------------------------------------------------------ #

    async def _resolve_missing(
        self, requested_path: str, options: ToolExecutionOptions, *, exclude_category: str | None = None
    ) -> ResolvedTarget | None:
        context = options.context
        if options.channel != "chat" or context is None or not context.user_messages():
            return None
        return await self._resolver.resolve(requested_path, context, exclude_category=exclude_category)

    async def _analyze_intent(
        self,
        message: str,
        path: str,
        updates: dict,
        body_update: BodyContentUpdate | None,
        warnings: list[str],
    ) -> UpdateIntentAnalysis | None:
        if self._intent is None:
            return None
        try:
            return await self._intent.analyze_update_intent(
                message, path=path, updates=updates, has_body_update=body_update is not None
            )
        except IntentAnalysisError as exc:
            logger.warning("Intent analysis failed: %s", exc)
            warnings.append(INTENT_UNAVAILABLE)
            return None

    def _guard_status(
        self,
        updates: dict,
        channel: str,
        last_message: str | None,
        intent: UpdateIntentAnalysis | None,
        warnings: list[str],
    ) -> None:
        """Strip or correct an agent-supplied status the user did not ask for."""
        if "status" not in updates or channel != "chat":
            return
        if intent is not None:
            if not intent.status_change_requested:
                updates.pop("status")
                warnings.append(STATUS_NOT_REQUESTED)
            elif intent.requested_status and intent.requested_status != updates["status"]:
                warnings.append(
                    f"Status '{updates['status']}' replaced with '{intent.requested_status}' "
                    "to match the user's request."
                )
                updates["status"] = intent.requested_status
            return
        if not last_message:
            updates.pop("status")
            warnings.append(STATUS_NO_CONTEXT)
        elif not has_status_request(last_message):
            updates.pop("status")
            warnings.append(STATUS_NOT_REQUESTED)

    async def _update_entry(self, args: dict, options: ToolExecutionOptions) -> ToolResult:
        requested_path: str = args["path"]
        channel = options.channel
        context = options.context
        updates: dict[str, Any] = dict(args.get("updates") or {})
        body_update = BodyContentUpdate(**args["body_content"]) if args.get("body_content") else None
        warnings: list[str] = []
        last_message = context.last_user_message() if context else None

        intent = None
        if channel == "chat" and last_message:
            intent = await self._analyze_intent(last_message, requested_path, updates, body_update, warnings)

        if "name" not in updates and "suggested_name" not in updates:
            if intent is not None and intent.title:
                updates["name"] = intent.title
            else:
                title, note = infer_title_and_note(last_message)
                if title:
                    updates["name"] = title
                if body_update is None and note:
                    body_update = BodyContentUpdate(content=note, mode="append")
        if body_update is None and intent is not None and intent.note:
            body_update = BodyContentUpdate(content=intent.note, mode="append")

        self._guard_status(updates, channel, last_message, intent, warnings)

        requested_status = updates.get("status")
        if requested_status is None and intent is not None and intent.status_change_requested:
            requested_status = intent.requested_status

        resolved_path = requested_path
        try:
            entry = await self._store.update(requested_path, updates, channel, body_update)
        except StorageError as exc:
            if not is_not_found(exc):
                raise
            target = None
            if (
                requested_status in ACTIVE_LIKE_STATUSES
                and suggests_reopen(last_message)
                and channel == "chat"
                and (is_task_category(category_of_path(requested_path)) or not category_of_path(requested_path))
            ):
                target = await self._resolver.resolve_completed_task(requested_path, context)
                if target is not None and "status" not in updates:
                    updates["status"] = requested_status
            if target is None:
                target = await self._resolve_missing(requested_path, options)
            if target is None:
                raise
            warnings.append(target.warning)
            resolved_path = target.path
            entry = await self._store.update(target.path, updates, channel, body_update)

        if canonical_category(entry.category) == "task":
            await self._link_after_update(entry, updates, body_update, last_message, intent, channel, warnings)

        outcome = verify_update(entry, resolved_path, updates, body_update)
        if not outcome.verified:
            logger.warning(
                "Update of %s failed verification: %s", resolved_path, outcome.failed,
                extra={"entry_path": resolved_path},
            )
            return ToolResult(success=False, error=outcome.error_message())

        return ToolResult(success=True, data=UpdateEntryResult(
            path=entry.path,
            requested_path=requested_path,
            updated_fields=list(updates),
            body_updated=body_update is not None,
            body_mode=body_update.mode if body_update else None,
            warnings=warnings,
            receipt=build_receipt("update", requested_path, resolved_path, outcome),
        ))

    async def _link_after_update(
        self,
        entry: Entry,
        updates: dict,
        body_update: BodyContentUpdate | None,
        last_message: str | None,
        intent: UpdateIntentAnalysis | None,
        channel,
        warnings: list[str],
    ) -> None:
        if self._linker is None:
            return
        explicit = updates.get("related_people") or updates.get("relatedPeople")
        if isinstance(explicit, list) and explicit:
            names = [n for n in explicit if isinstance(n, str)]
        else:
            found: dict[str, None] = {}
            for person in intent.related_people if intent else []:
                found[person] = None
            for text in (entry.name, body_update.content if body_update else None, last_message):
                for person in extract_person_names(text or ""):
                    found[person] = None
            names = list(found)
        if not names:
            return
        try:
            await self._linker.link_people_for_entry(entry, names, channel)
        except Exception as exc:
            logger.warning("Linking people for %s failed: %s", entry.path, exc)
            warnings.append(f"Related people could not be linked: {exc}")

    async def _move_entry(self, args: dict, options: ToolExecutionOptions) -> ToolResult:
        requested_path: str = args["path"]
        target_category = canonical_category(args["targetCategory"])
        warnings: list[str] = []

        resolved_path = requested_path
        try:
            entry = await self._store.move(requested_path, target_category, options.channel)
        except StorageError as exc:
            if not is_not_found(exc):
                raise
            target = await self._resolve_missing(requested_path, options, exclude_category=target_category)
            if target is None:
                raise
            warnings.append(target.warning)
            resolved_path = target.path
            entry = await self._store.move(target.path, target_category, options.channel)

        outcome = verify_move(entry, target_category)
        if not outcome.verified:
            logger.warning(
                "Move of %s failed verification: %s", resolved_path, outcome.failed,
                extra={"entry_path": resolved_path},
            )
            return ToolResult(success=False, error=outcome.error_message())

        return ToolResult(success=True, data=MoveEntryResult(
            old_path=resolved_path,
            new_path=entry.path,
            category=target_category,
            warnings=warnings,
            receipt=build_receipt("move", requested_path, resolved_path, outcome),
        ))

    async def _delete_entry(self, args: dict, options: ToolExecutionOptions) -> ToolResult:
        requested_path: str = args["path"]
        warnings: list[str] = []

        try:
            existing = await self._store.read(requested_path)
        except StorageError as exc:
            if not is_not_found(exc):
                raise
            target = await self._resolve_missing(requested_path, options)
            if target is None:
                raise
            warnings.append(target.warning)
            existing = await self._store.read(target.path)

        name = existing.name
        if existing.category == INBOX_CATEGORY:
            name = existing.fields.get("suggested_name") or name

        await self._store.delete(existing.path, options.channel)

        outcome = await verify_delete(self._store, existing.path)
        if not outcome.verified:
            logger.warning(
                "Delete of %s failed verification: %s", existing.path, outcome.failed,
                extra={"entry_path": existing.path},
            )
            return ToolResult(success=False, error=outcome.error_message())

        return ToolResult(success=True, data=DeleteEntryResult(
            path=existing.path,
            name=name,
            category=existing.category,
            warnings=warnings,
            receipt=build_receipt("delete", requested_path, existing.path, outcome),
        ))

    async def _merge_entries(self, args: dict, options: ToolExecutionOptions) -> ToolResult:
        target_path = args["targetPath"]
        source_paths = args["sourcePaths"]
        if not target_path or not source_paths:
            return ToolResult(
                success=False, error="targetPath and sourcePaths are required for merge_entries"
            )
        merged = await self._store.merge(target_path, source_paths, options.channel)
        return ToolResult(success=True, data=MergeEntriesResult(entry=merged, merged_paths=list(source_paths)))
