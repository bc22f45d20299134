"""Integration tests for ContentManager envelopes over a real store."""

import pytest

from quire.domain import ContentManager


def _ok(envelope):
    assert envelope.success, envelope.to_dict()
    return envelope.data


def _error(envelope):
    assert not envelope.success
    return envelope.error_code, envelope.error_message


class TestSingleItems:
    """Create, read, update and delete through the manager."""

    def test_create_then_get(self, test_manager, sample_fields):
        created = _ok(test_manager.create_content(sample_fields))

        assert created["title"] == sample_fields["title"]
        assert created["content_type"] == "markdown"
        assert created["metadata"] == {"author": "sam", "level": 1}

        fetched = _ok(test_manager.get_content(created["id"]))
        assert fetched == created

    def test_create_defaults(self, test_manager):
        created = _ok(test_manager.create_content({"title": "T", "content": "C"}))

        assert created["content_type"] == "text"
        assert created["tags"] == ""
        assert created["metadata"] == {}
        assert created["created_at"] == created["updated_at"]

    def test_document_stored_as_text(self, test_manager):
        created = _ok(
            test_manager.create_content(
                {"title": "T", "content": "C", "content_type": "document"}
            )
        )
        assert created["content_type"] == "text"

    def test_update_preserves_identity(self, test_manager, sample_fields):
        created = _ok(test_manager.create_content(sample_fields))

        updated = _ok(
            test_manager.update_content(
                created["id"], {"title": "Renamed", "content": "New body"}
            )
        )

        assert updated["id"] == created["id"]
        assert updated["created_at"] == created["created_at"]
        assert updated["updated_at"] >= created["updated_at"]
        assert updated["title"] == "Renamed"
        # Omitted optional fields fall back to their defaults
        assert updated["content_type"] == "text"
        assert updated["tags"] == ""

    def test_update_missing_is_404(self, test_manager):
        assert _error(test_manager.update_content(999999, {"title": "T", "content": "C"})) == (
            404,
            "Content not found",
        )

    def test_update_checks_existence_before_fields(self, test_manager):
        assert _error(test_manager.update_content(999999, {"title": ""}))[0] == 404

    def test_update_invalid_fields(self, test_manager, sample_fields):
        created = _ok(test_manager.create_content(sample_fields))

        assert _error(test_manager.update_content(created["id"], {"title": "T"})) == (
            400,
            "Content is required and must be a string",
        )

    def test_delete_is_terminal(self, test_manager, sample_fields):
        created = _ok(test_manager.create_content(sample_fields))

        assert _ok(test_manager.delete_content(created["id"])) == {}
        assert _error(test_manager.get_content(created["id"]))[0] == 404
        assert _error(test_manager.delete_content(created["id"]))[0] == 404

    def test_get_missing(self, test_manager):
        assert _error(test_manager.get_content(999999)) == (404, "Content not found")

    @pytest.mark.parametrize("bad_id", ["1", None, True, 1.5])
    def test_non_integer_id(self, test_manager, bad_id):
        assert _error(test_manager.get_content(bad_id)) == (
            400,
            "ID parameter is required and must be an integer",
        )

    @pytest.mark.parametrize("content_id", [2**63, 2**64, -(2**63) - 1])
    def test_id_outside_64_bits(self, test_manager, content_id):
        assert _error(test_manager.get_content(content_id)) == (400, "Invalid content ID")
        assert _error(test_manager.delete_content(content_id)) == (400, "Invalid content ID")
        assert _error(
            test_manager.update_content(content_id, {"title": "T", "content": "C"})
        ) == (400, "Invalid content ID")

    @pytest.mark.parametrize(
        "fields, message",
        [
            ({"title": "", "content": "C"}, "Title cannot be empty"),
            ({"title": "T", "content": "C", "content_type": "video"}, "Invalid content type"),
            ({"title": "x" * 501, "content": "C"}, "Title is too long (max 500 characters)"),
        ],
    )
    def test_create_validation(self, test_manager, fields, message):
        assert _error(test_manager.create_content(fields)) == (400, message)
        assert _ok(test_manager.list_content())["total_count"] == 0


class TestQueries:
    """Search, listing, tags and statistics."""

    def test_search_literal_punctuation(self, test_manager, sample_fields):
        created = _ok(test_manager.create_content(sample_fields))

        result = _ok(test_manager.search_content("Node.js"))

        assert [item["id"] for item in result["items"]] == [created["id"]]
        assert result["total_count"] == 1
        assert result["page"] == 1
        assert result["page_size"] == 20

    @pytest.mark.parametrize("query", ["", "   ", None, 42])
    def test_search_rejects_empty(self, test_manager, query):
        assert _error(test_manager.search_content(query)) == (
            400,
            "Search query cannot be empty",
        )

    def test_search_with_syntax_characters(self, test_manager):
        _ok(test_manager.create_content({"title": "C++ (intro)", "content": "pointers"}))

        assert _ok(test_manager.search_content('AND ( "x'))["items"] == []

    def test_search_approximate_count(self, test_manager):
        for n in range(3):
            _ok(test_manager.create_content({"title": f"gadget {n}", "content": "x"}))

        result = _ok(test_manager.search_content("gadget", page_size=2))

        assert len(result["items"]) == 2
        assert result["total_count"] == 2

    def test_search_exact_count(self, test_repository, test_settings):
        manager = ContentManager(
            test_repository, test_settings.model_copy(update={"exact_search_counts": True})
        )
        for n in range(3):
            _ok(manager.create_content({"title": f"gadget {n}", "content": "x"}))

        page_two = _ok(manager.search_content("gadget", page=2, page_size=2))

        assert len(page_two["items"]) == 1
        assert page_two["total_count"] == 3
        assert page_two["total_pages"] == 2
        assert page_two["has_previous"] is True

    def test_pagination_walk(self, test_manager):
        ids = [
            _ok(test_manager.create_content({"title": f"T{n}", "content": "C"}))["id"]
            for n in range(45)
        ]

        seen = []
        page = 1
        while True:
            result = _ok(test_manager.list_content(page, 10))
            assert result["total_count"] == 45
            assert result["total_pages"] == 5
            seen.extend(item["id"] for item in result["items"])
            if not result["has_next"]:
                break
            page += 1

        assert page == 5
        assert sorted(seen) == sorted(ids)
        assert len(seen) == len(set(seen))

    def test_page_size_out_of_range_uses_default(self, test_manager):
        result = _ok(test_manager.list_content(0, 1000))

        assert result["page"] == 1
        assert result["page_size"] == 20

    def test_empty_store(self, test_manager):
        result = _ok(test_manager.list_content())

        assert result["items"] == []
        assert result["total_pages"] == 0
        assert result["has_next"] is False

    def test_content_by_tag(self, test_manager, sample_fields):
        created = _ok(test_manager.create_content(sample_fields))
        _ok(test_manager.create_content({"title": "T", "content": "C", "tags": "other"}))

        result = _ok(test_manager.get_content_by_tag("nodejs"))

        assert [item["id"] for item in result["items"]] == [created["id"]]

    def test_content_by_empty_tag(self, test_manager):
        assert _error(test_manager.get_content_by_tag(" ")) == (400, "Tag cannot be empty")

    def test_recent_content(self, test_manager):
        ids = [
            _ok(test_manager.create_content({"title": f"T{n}", "content": "C"}))["id"]
            for n in range(3)
        ]

        recent = _ok(test_manager.get_recent_content(2))

        assert [item["id"] for item in recent] == [ids[2], ids[1]]

    def test_tags_and_statistics(self, test_manager):
        _ok(test_manager.create_content({"title": "A", "content": "C", "tags": "zeta, alpha"}))
        _ok(test_manager.create_content({"title": "B", "content": "C", "tags": "alpha, mid"}))

        assert _ok(test_manager.get_tags()) == ["alpha", "mid", "zeta"]
        assert _ok(test_manager.get_statistics()) == {
            "total_content": 2,
            "total_tags": 3,
            "tags": ["alpha", "mid", "zeta"],
        }

    def test_tags_empty_store(self, test_manager):
        assert test_manager.get_tags().to_dict() == {"success": True, "data": []}


class TestBatches:
    """Bulk operations plus export and import."""

    def test_bulk_create_partial(self, test_manager):
        result = _ok(
            test_manager.bulk_create(
                [
                    {"title": "One", "content": "C"},
                    {"title": "", "content": "C"},
                    "nope",
                    {"title": "Four", "content": "C"},
                ]
            )
        )

        assert result["created_count"] == 2
        assert result["total_count"] == 4
        assert result["errors"] == [
            "Item 1: Title cannot be empty",
            "Item 2: Content item must be an object",
        ]

    def test_bulk_create_requires_list(self, test_manager):
        assert _error(test_manager.bulk_create({"title": "T"})) == (
            400,
            "Items must be an array",
        )

    def test_bulk_delete(self, test_manager):
        first = _ok(test_manager.create_content({"title": "A", "content": "C"}))["id"]
        second = _ok(test_manager.create_content({"title": "B", "content": "C"}))["id"]

        result = _ok(test_manager.bulk_delete([first, second, 999999]))

        assert result["deleted_count"] == 2
        assert result["total_count"] == 3
        assert result["errors"] == ["Failed to delete ID: 999999"]
        assert _ok(test_manager.list_content())["total_count"] == 0

    def test_bulk_delete_out_of_range_id(self, test_manager):
        first = _ok(test_manager.create_content({"title": "A", "content": "C"}))["id"]
        second = _ok(test_manager.create_content({"title": "B", "content": "C"}))["id"]

        result = _ok(test_manager.bulk_delete([first, 2**64, second]))

        assert result["deleted_count"] == 2
        assert result["errors"] == ["Failed to delete ID: 18446744073709551616"]

    def test_bulk_delete_requires_ids(self, test_manager):
        assert _error(test_manager.bulk_delete([])) == (400, "IDs list cannot be empty")

    def test_export_then_import(self, test_manager, sample_fields):
        _ok(test_manager.create_content(sample_fields))
        _ok(test_manager.create_content({"title": "Second", "content": "C"}))

        exported = _ok(test_manager.export_content())
        assert exported["version"] == "1.0"
        assert len(exported["content"]) == 2

        result = _ok(test_manager.import_content(exported))

        assert result["created_count"] == 2
        listing = _ok(test_manager.list_content())
        assert listing["total_count"] == 4
        titles = [item["title"] for item in listing["items"]]
        assert titles.count(sample_fields["title"]) == 2

    def test_export_rejects_other_formats(self, test_manager):
        assert _error(test_manager.export_content("csv")) == (
            400,
            "Only JSON format is supported",
        )

    @pytest.mark.parametrize("data", [None, [], {"content": "x"}, {"items": []}])
    def test_import_rejects_bad_documents(self, test_manager, data):
        assert _error(test_manager.import_content(data)) == (400, "Invalid import data format")


class TestStoreFailures:
    """A store that refuses a write surfaces as a 500 envelope."""

    def test_create(self, test_manager, monkeypatch):
        monkeypatch.setattr(test_manager.repository, "create", lambda item: None)

        assert _error(test_manager.create_content({"title": "T", "content": "C"})) == (
            500,
            "Failed to create content",
        )

    def test_update(self, test_manager, sample_fields, monkeypatch):
        created = _ok(test_manager.create_content(sample_fields))
        monkeypatch.setattr(test_manager.repository, "update", lambda item: False)

        assert _error(test_manager.update_content(created["id"], sample_fields)) == (
            500,
            "Failed to update content",
        )

    def test_delete(self, test_manager, sample_fields, monkeypatch):
        created = _ok(test_manager.create_content(sample_fields))
        monkeypatch.setattr(test_manager.repository, "delete", lambda content_id: False)

        assert _error(test_manager.delete_content(created["id"])) == (
            500,
            "Failed to delete content",
        )
        assert _ok(test_manager.get_content(created["id"]))["id"] == created["id"]

    def test_bulk_create_reports_per_item(self, test_manager, monkeypatch):
        monkeypatch.setattr(test_manager.repository, "create", lambda item: None)

        result = _ok(test_manager.bulk_create([{"title": "T", "content": "C"}]))

        assert result["created_count"] == 0
        assert result["errors"] == ["Item 0: Failed to create content"]
