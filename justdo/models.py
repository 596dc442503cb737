"""
Pydantic v2 data models for justdo.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Channel = Literal["chat", "email", "api"]
ClassifiedCategory = Literal["people", "projects", "ideas", "task"]
BodyContentMode = Literal["append", "replace", "section"]
MutationOperation = Literal["update", "move", "delete"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --------------------------------------------------------------------------- #
# Conversation context                                                         #
# --------------------------------------------------------------------------- #

class Message(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    created_at: datetime = Field(default_factory=_utcnow)


class ConversationSummary(BaseModel):
    summary: str
    message_count: int = 0
    created_at: datetime = Field(default_factory=_utcnow)


class ContextWindow(BaseModel):
    """Everything an LLM call gets to see about the conversation so far."""

    system_prompt: str = ""
    index_content: str = ""
    summaries: list[ConversationSummary] = Field(default_factory=list)  # chronological
    recent_messages: list[Message] = Field(default_factory=list)  # chronological

    def user_messages(self, limit: int | None = None) -> list[str]:
        """User message texts, newest first."""
        texts = [m.content for m in reversed(self.recent_messages) if m.role == "user" and m.content]
        return texts[:limit] if limit is not None else texts

    def last_user_message(self) -> str | None:
        texts = self.user_messages(limit=1)
        return texts[0] if texts else None

    def recent_turns(self, count: int) -> list[Message]:
        return self.recent_messages[-count:] if count > 0 else []


# --------------------------------------------------------------------------- #
# Classification                                                               #
# --------------------------------------------------------------------------- #

class ClassificationInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    hints: Optional[str] = None
    context: ContextWindow = Field(default_factory=ContextWindow)


class PeopleFields(BaseModel):
    kind: Literal["people"] = "people"
    context: str = ""
    follow_ups: list[str] = Field(default_factory=list)
    related_projects: list[str] = Field(default_factory=list)


class ProjectsFields(BaseModel):
    kind: Literal["projects"] = "projects"
    status: Literal["active", "waiting", "blocked", "someday"] = "active"
    next_action: str = ""
    related_people: list[str] = Field(default_factory=list)
    due_date: Optional[str] = None


class IdeasFields(BaseModel):
    kind: Literal["ideas"] = "ideas"
    one_liner: str = ""
    related_projects: list[str] = Field(default_factory=list)


class TaskFields(BaseModel):
    kind: Literal["task"] = "task"
    status: Literal["pending"] = "pending"
    due_date: Optional[str] = None
    due_at: Optional[str] = None
    duration_minutes: Optional[int] = None
    fixed_at: Optional[str] = None
    priority: Optional[int] = None
    related_people: list[str] = Field(default_factory=list)


CategoryFields = Annotated[
    Union[PeopleFields, ProjectsFields, IdeasFields, TaskFields],
    Field(discriminator="kind"),
]


class ClassificationResult(BaseModel):
    category: ClassifiedCategory
    confidence: float = Field(ge=0.0, le=1.0)
    name: str
    slug: str
    fields: CategoryFields
    related_entries: list[str] = Field(default_factory=list)
    reasoning: str = ""
    body_content: str = ""

    @model_validator(mode="after")
    def fields_match_category(self) -> "ClassificationResult":
        if self.fields.kind != self.category:
            raise ValueError(
                f"fields of kind '{self.fields.kind}' do not match category '{self.category}'"
            )
        return self


# --------------------------------------------------------------------------- #
# Tool envelope                                                                #
# --------------------------------------------------------------------------- #

class ToolCall(BaseModel):
    name: str
    # Any: non-object arguments are reported by validation.
    arguments: Any = Field(default_factory=dict)


class ToolResult(BaseModel):
    success: bool
    data: Any = None
    error: Optional[str] = None


class ToolExecutionOptions(BaseModel):
    channel: Channel = "api"
    context: Optional[ContextWindow] = None
    allow_queue: bool = True


class ValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


# --------------------------------------------------------------------------- #
# Entries (owned by the storage collaborator)                                  #
# --------------------------------------------------------------------------- #

class Entry(BaseModel):
    path: str
    category: str
    name: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)
    body: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def status(self) -> Optional[str]:
        value = self.fields.get("status")
        return str(value) if value is not None else None

    @property
    def due_date(self) -> Optional[str]:
        value = self.fields.get("due_date")
        return str(value) if value else None


class BodyContentUpdate(BaseModel):
    content: str
    mode: BodyContentMode
    section: Optional[str] = None


class SearchHit(BaseModel):
    path: str
    name: str
    category: str
    snippet: str = ""
    score: Optional[float] = None


class SearchResponse(BaseModel):
    entries: list[SearchHit] = Field(default_factory=list)
    total: int = 0


# --------------------------------------------------------------------------- #
# Mutation receipts                                                            #
# --------------------------------------------------------------------------- #

class VerificationSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    verified: bool
    checks: tuple[str, ...] = ()


class MutationReceipt(BaseModel):
    model_config = ConfigDict(frozen=True)

    operation: MutationOperation
    requested_path: str
    resolved_path: str
    verification: VerificationSummary
    timestamp: datetime = Field(default_factory=_utcnow)


# --------------------------------------------------------------------------- #
# Per-tool payloads                                                            #
# --------------------------------------------------------------------------- #

class CaptureResult(BaseModel):
    path: str = ""
    category: str
    name: str = ""
    confidence: float = 0.0
    clarification_needed: bool = False
    queued: bool = False
    queue_id: Optional[str] = None
    message: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


class ListEntriesResult(BaseModel):
    entries: list[Entry]
    total: int


class GetEntryResult(BaseModel):
    entry: Entry


class DigestResult(BaseModel):
    type: Literal["daily", "weekly"]
    content: str


class UpdateEntryResult(BaseModel):
    path: str
    requested_path: str
    updated_fields: list[str] = Field(default_factory=list)
    body_updated: bool = False
    body_mode: Optional[BodyContentMode] = None
    warnings: list[str] = Field(default_factory=list)
    receipt: Optional[MutationReceipt] = None


class MoveEntryResult(BaseModel):
    old_path: str
    new_path: str
    category: str
    warnings: list[str] = Field(default_factory=list)
    receipt: Optional[MutationReceipt] = None


class SearchResult(BaseModel):
    entries: list[SearchHit]
    total: int


class DeleteEntryResult(BaseModel):
    path: str
    name: str
    category: str
    warnings: list[str] = Field(default_factory=list)
    receipt: Optional[MutationReceipt] = None


class DuplicateResult(BaseModel):
    duplicates: list[SearchHit]


class MergeEntriesResult(BaseModel):
    entry: Entry
    merged_paths: list[str]


# --------------------------------------------------------------------------- #
# Safety / enrichment service outputs                                          #
# --------------------------------------------------------------------------- #

class GuardrailDecision(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    confidence: float = 0.5


class UpdateIntentAnalysis(BaseModel):
    title: Optional[str] = None
    note: Optional[str] = None
    related_people: list[str] = Field(default_factory=list)
    status_change_requested: bool = False
    requested_status: Optional[str] = None
    confidence: float = 0.5


class ActionItem(BaseModel):
    text: str
    type: Literal["project", "task"] = "project"
    due_date: Optional[str] = None
    confidence: float = 0.5


class ActionExtractionResult(BaseModel):
    primary_action: Optional[str] = None
    actions: list[ActionItem] = Field(default_factory=list)
