"""
Tests for storage/repositories/contents.py.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from contentops.database import ContentVersion
from contentops.errors import ConflictError, NotFoundError


def _version(number, body="body"):
    return ContentVersion(version_number=number, body=body)


class TestItems:
    """Item creation, lookup and listing."""

    def test_create_and_get(self, repository):
        item = repository.create_item("Launch post", organization_id="org-1", created_by_user_id="u1")

        fetched = repository.get_item(item.id)
        assert fetched is not None
        assert fetched.title == "Launch post"
        assert fetched.organization_id == "org-1"
        assert fetched.created_by_user_id == "u1"

    def test_create_with_explicit_id(self, repository):
        item = repository.create_item("Launch post", content_id="c1")
        assert item.id == "c1"

    def test_create_duplicate_id_conflicts(self, repository):
        repository.create_item("Launch post", content_id="c1")
        with pytest.raises(ConflictError):
            repository.create_item("Other", content_id="c1")

    def test_get_missing_returns_none(self, repository):
        assert repository.get_item("nope") is None

    def test_require_missing_raises(self, repository):
        with pytest.raises(NotFoundError) as exc:
            repository.require_item("nope")
        assert exc.value.content_id == "nope"

    def test_list_filters_by_org_and_status(self, repository):
        a = repository.create_item("A post", organization_id="org-1")
        repository.create_item("B post", organization_id="org-2")
        c = repository.create_item("C post", organization_id="org-1")
        repository.update_item(c.id, status="SUBMITTED")

        assert {i.id for i in repository.list_items(organization_id="org-1")} == {a.id, c.id}
        assert [i.id for i in repository.list_items(organization_id="org-1", status="SUBMITTED")] == [c.id]
        assert len(repository.list_items()) == 3

    def test_update_rejects_unknown_fields(self, repository):
        item = repository.create_item("A post")
        with pytest.raises(ValueError):
            repository.update_item(item.id, organization_id="org-9")


class TestVersions:
    """Append-only version writes."""

    def test_latest_is_none_without_versions(self, repository):
        item = repository.create_item("A post")
        assert repository.get_latest_version(item.id) is None

    def test_append_and_latest(self, repository):
        item = repository.create_item("A post")
        repository.append_version(item.id, _version(1, "first"))
        repository.append_version(item.id, _version(2, "second"))

        latest = repository.get_latest_version(item.id)
        assert latest.version_number == 2
        assert latest.body == "second"
        assert [v.version_number for v in repository.list_versions(item.id)] == [2, 1]

    def test_append_to_unknown_item(self, repository):
        with pytest.raises(NotFoundError):
            repository.append_version("missing", _version(1))

    def test_append_duplicate_number_conflicts(self, repository):
        """A stale writer reusing a taken number gets ConflictError."""
        item = repository.create_item("A post")
        repository.append_version(item.id, _version(1, "first"))

        with pytest.raises(ConflictError) as exc:
            repository.append_version(item.id, _version(1, "racing"))

        assert exc.value.version_number == 1
        # The session stays usable and the original survives
        assert repository.get_latest_version(item.id).body == "first"
        assert len(repository.list_versions(item.id)) == 1

    def test_append_bumps_item_updated_at(self, repository):
        item = repository.create_item("A post")
        before = item.updated_at
        repository.append_version(item.id, _version(1))
        assert repository.get_item(item.id).updated_at >= before


class TestExpectedLatest:
    """Optimistic concurrency via expected latest version number."""

    def test_first_version_expected_zero(self, repository):
        item = repository.create_item("A post")
        stored = repository.append_version_if_latest_matches(item.id, 0, _version(1))
        assert stored.version_number == 1

    def test_first_version_expected_none(self, repository):
        item = repository.create_item("A post")
        stored = repository.append_version_if_latest_matches(item.id, None, _version(1))
        assert stored.version_number == 1

    def test_stale_expectation_conflicts(self, repository):
        item = repository.create_item("A post")
        repository.append_version(item.id, _version(1, "first"))

        with pytest.raises(ConflictError):
            repository.append_version_if_latest_matches(item.id, 0, _version(1, "stale"))

        assert len(repository.list_versions(item.id)) == 1

    def test_unknown_item_not_found(self, repository):
        with pytest.raises(NotFoundError):
            repository.append_version_if_latest_matches("missing", 0, _version(1))


class TestWriteFailures:
    """Only version-number collisions become ConflictError."""

    def test_missing_body_is_not_a_conflict(self, repository):
        item = repository.create_item("A post")

        with pytest.raises(IntegrityError):
            repository.append_version(item.id, _version(1, None))

        assert repository.list_versions(item.id) == []
        assert repository.append_version(item.id, _version(1)).version_number == 1

    def test_duplicate_number_is_a_conflict(self, repository):
        item = repository.create_item("A post")
        repository.append_version(item.id, _version(1))

        with pytest.raises(ConflictError) as exc:
            repository.append_version(item.id, _version(1, "again"))

        assert isinstance(exc.value.__cause__, IntegrityError)
        assert exc.value.version_number == 1

    def test_item_fields_commit_with_version(self, repository):
        item = repository.create_item("A post", compliance_score=50)

        repository.append_version_if_latest_matches(
            item.id, 0, _version(1), item_fields={"title": "Renamed", "compliance_score": 80}
        )

        fetched = repository.get_item(item.id)
        assert (fetched.title, fetched.compliance_score) == ("Renamed", 80)

    def test_item_fields_discarded_on_collision(self, repository):
        item = repository.create_item("A post")
        repository.append_version(item.id, _version(1))

        with pytest.raises(ConflictError):
            repository.append_version(item.id, _version(1, "again"), item_fields={"title": "Renamed"})

        assert repository.get_item(item.id).title == "A post"

    def test_unknown_item_field_rejected(self, repository):
        item = repository.create_item("A post")
        with pytest.raises(ValueError):
            repository.append_version(item.id, _version(1), item_fields={"organization_id": "org-9"})
        assert repository.list_versions(item.id) == []

    def test_create_item_with_versions(self, repository):
        item = repository.create_item("A post", content_id="c1", versions=[_version(1, "one"), _version(2, "two")])

        assert [v.version_number for v in repository.list_versions("c1")] == [2, 1]
        assert repository.get_item("c1").body == "two"
        assert item.latest_version.body == "two"

    def test_create_item_with_bad_version_stores_nothing(self, repository):
        with pytest.raises(IntegrityError):
            repository.create_item("A post", content_id="c1", versions=[_version(1, None)])

        assert repository.get_item("c1") is None
        assert repository.list_items() == []
