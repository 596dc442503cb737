"""Tests for justdo/storage/memory.py."""

import pytest

from justdo.exceptions import EntryNotFoundError, InvalidEntryDataError, is_not_found
from justdo.models import BodyContentUpdate
from justdo.storage.memory import apply_body_update


class TestApplyBodyUpdate:
    def test_replace(self):
        assert apply_body_update("old", BodyContentUpdate(content=" new ", mode="replace")) == "new"

    def test_append(self):
        assert apply_body_update("first", BodyContentUpdate(content="second", mode="append")) == "first\n\nsecond"
        assert apply_body_update("", BodyContentUpdate(content="only", mode="append")) == "only"

    def test_section_appends_to_existing_section(self):
        body = "## Notes\nfirst"
        update = BodyContentUpdate(content="second", mode="section", section="Notes")
        assert apply_body_update(body, update) == "## Notes\nfirst\nsecond"

    def test_section_inserts_before_next_heading(self):
        body = "## Notes\nfirst\n\n## Log\nx"
        update = BodyContentUpdate(content="second", mode="section", section="Notes")
        assert apply_body_update(body, update) == "## Notes\nfirst\nsecond\n\n## Log\nx"

    def test_section_created_when_missing(self):
        update = BodyContentUpdate(content="2026-10-18 kickoff", mode="section", section="Log")
        assert apply_body_update("intro", update) == "intro\n\n## Log\n2026-10-18 kickoff"


class TestInMemoryEntryStore:
    @pytest.mark.asyncio
    async def test_create_assigns_path_and_default_status(self, store):
        entry = await store.create("task", {"name": "Call mom"}, "api")
        assert entry.path == "task/call-mom"
        assert entry.status == "pending"
        assert "name" not in entry.fields

        again = await store.create("task", {"name": "Call mom"}, "api")
        assert again.path == "task/call-mom-2"

    @pytest.mark.asyncio
    async def test_admin_category_is_canonicalised(self, store):
        entry = await store.create("admin", {"name": "Pay rent"}, "api")
        assert entry.category == "task"
        assert entry.path.startswith("task/")

    @pytest.mark.asyncio
    async def test_inbox_entry_uses_suggested_name(self, store):
        entry = await store.create("inbox", {"suggested_name": "Something vague"}, "chat")
        assert entry.path == "inbox/something-vague"

    @pytest.mark.asyncio
    async def test_create_without_name_rejected(self, store):
        with pytest.raises(InvalidEntryDataError):
            await store.create("task", {}, "api")

    @pytest.mark.asyncio
    async def test_read_missing_is_not_found(self, store):
        with pytest.raises(EntryNotFoundError) as exc_info:
            await store.read("task/nope")
        assert is_not_found(exc_info.value)

    @pytest.mark.asyncio
    async def test_read_accepts_md_suffix(self, store):
        await store.create("ideas", {"name": "Solar kettle"}, "api")
        entry = await store.read("ideas/solar-kettle.md")
        assert entry.name == "Solar kettle"

    @pytest.mark.asyncio
    async def test_update_fields_name_and_body(self, store):
        created = await store.create("task", {"name": "Call mom"}, "api")
        updated = await store.update(
            created.path,
            {"status": "done", "name": "Call mum"},
            "api",
            BodyContentUpdate(content="Talked for an hour", mode="append"),
        )
        assert updated.status == "done"
        assert updated.name == "Call mum"
        assert updated.body == "Talked for an hour"

    @pytest.mark.asyncio
    async def test_returned_entries_are_copies(self, store):
        created = await store.create("task", {"name": "Call mom"}, "api")
        created.fields["status"] = "done"
        assert (await store.read(created.path)).status == "pending"

    @pytest.mark.asyncio
    async def test_move(self, store):
        created = await store.create("ideas", {"name": "Marathon training"}, "api")
        moved = await store.move(created.path, "projects", "api")
        assert moved.path == "projects/marathon-training"
        assert moved.category == "projects"
        assert moved.status == "active"
        with pytest.raises(EntryNotFoundError):
            await store.read(created.path)

    @pytest.mark.asyncio
    async def test_delete(self, store):
        created = await store.create("task", {"name": "Call mom"}, "api")
        await store.delete(created.path, "api")
        with pytest.raises(EntryNotFoundError):
            await store.read(created.path)

    @pytest.mark.asyncio
    async def test_list_with_filters(self, store):
        await store.create("task", {"name": "A"}, "api")
        await store.create("task", {"name": "B", "status": "done"}, "api")
        await store.create("ideas", {"name": "C"}, "api")
        done = await store.list("task", {"status": "done"})
        assert [e.name for e in done] == ["B"]
        assert len(await store.list()) == 3

    @pytest.mark.asyncio
    async def test_merge(self, store):
        target = await store.create("projects", {"name": "House move"}, "api", "## Notes\nboxes")
        source = await store.create("projects", {"name": "Moving house"}, "api", "book van")
        merged = await store.merge(target.path, [source.path], "api")
        assert "## Merged: Moving house\nbook van" in merged.body
        with pytest.raises(EntryNotFoundError):
            await store.read(source.path)

    @pytest.mark.asyncio
    async def test_index_content(self, store):
        assert await store.get_index_content() == ""
        await store.create("task", {"name": "Call mom"}, "api")
        await store.create("ideas", {"name": "Solar kettle"}, "api")
        assert await store.get_index_content() == (
            "- ideas/solar-kettle: Solar kettle\n- task/call-mom: Call mom [pending]"
        )


class TestInMemorySearchIndex:
    @pytest.mark.asyncio
    async def test_ranked_by_overlap(self, store, search_index):
        await store.create("task", {"name": "Call mom"}, "api")
        await store.create("task", {"name": "Call the plumber about the leak"}, "api")
        response = await search_index.search("call mom")
        assert response.entries[0].path == "task/call-mom"
        assert response.entries[0].score == 1.0
        assert response.total == 2

    @pytest.mark.asyncio
    async def test_category_and_limit(self, store, search_index):
        await store.create("task", {"name": "Garden shed"}, "api")
        await store.create("ideas", {"name": "Garden pond"}, "api")
        response = await search_index.search("garden", category="ideas", limit=1)
        assert [h.path for h in response.entries] == ["ideas/garden-pond"]

    @pytest.mark.asyncio
    async def test_empty_query(self, search_index):
        response = await search_index.search("!")
        assert response.entries == []
        assert response.total == 0
