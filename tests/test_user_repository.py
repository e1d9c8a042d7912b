"""User repository tests against an in-memory SQLite database."""

import pytest

from roster.errors import StorageConnectionError
from roster.models import RecordErrorCode, UserInput


class TestCreate:
    def test_create_returns_record_with_assigned_id(self, repo, dupont):
        result = repo.create(dupont)

        assert result
        assert result.success is True
        assert result.error_code is None
        assert result.data.id > 0
        assert result.data.last_name == "Dupont"
        assert result.data.first_name == "Jean"
        assert result.data.email == "jean.dupont@email.com"
        assert result.data.phone == "0123456789"
        assert result.data.created_at is not None
        assert result.data.updated_at is None

    def test_create_then_read_one_returns_sanitized_fields(self, repo):
        result = repo.create(UserInput(
            last_name="<b>O'Brien</b>",
            first_name="Jean & <i>Luc</i>",
            email="luc@example.com",
            phone="<script>alert(1)</script>0600",
        ))

        stored = repo.read_one(result.data.id)
        assert stored is not None
        assert stored.last_name == "O&#039;Brien"
        assert stored.first_name == "Jean &amp; Luc"
        assert stored.email == "luc@example.com"
        assert stored.phone == "alert(1)0600"

    def test_literal_less_than_is_kept_and_escaped(self, repo):
        result = repo.create(UserInput(
            last_name="Dupont < Martin", first_name="Jean", email="dm@example.com",
        ))

        assert repo.read_one(result.data.id).last_name == "Dupont &lt; Martin"

    def test_scenario_dupont_appears_first_and_count_increases(self, repo, martin, dupont):
        repo.create(martin)
        before = repo.count()

        result = repo.create(dupont)

        assert result
        assert repo.count() == before + 1
        assert repo.read_all()[0].id == result.data.id
        assert repo.read_all()[0].email == "jean.dupont@email.com"

    def test_duplicate_email_is_rejected_and_count_unchanged(self, repo, dupont):
        repo.create(dupont)
        before = repo.count()

        result = repo.create(UserInput(
            last_name="Autre", first_name="Jean", email=dupont.email,
        ))

        assert not result
        assert result.error_code == RecordErrorCode.EMAIL_TAKEN
        assert repo.count() == before

    def test_unique_constraint_backs_up_the_check(self, repo, dupont, monkeypatch):
        repo.create(dupont)
        # Simulate a concurrent writer that passed the check first.
        monkeypatch.setattr(repo, "_email_taken", lambda conn, email, exclude_id: False)

        result = repo.create(UserInput(
            last_name="Race", first_name="Lost", email=dupont.email,
        ))

        assert result.error_code == RecordErrorCode.EMAIL_TAKEN
        assert repo.count() == 1

    def test_markup_only_name_is_a_validation_error(self, repo):
        result = repo.create(UserInput(
            last_name="<b></b>", first_name="Jean", email="x@example.com",
        ))

        assert result.error_code == RecordErrorCode.VALIDATION_ERROR
        assert repo.count() == 0

    def test_blank_phone_is_stored_as_null(self, repo):
        result = repo.create(UserInput(
            last_name="Sans", first_name="Tel", email="sans@example.com", phone="   ",
        ))

        assert repo.read_one(result.data.id).phone is None

    def test_created_at_is_non_decreasing_with_id(self, repo):
        for i in range(5):
            repo.create(UserInput(last_name=f"N{i}", first_name="P", email=f"{i}@example.com"))

        records = sorted(repo.read_all(), key=lambda r: r.id)
        for earlier, later in zip(records, records[1:]):
            assert earlier.created_at <= later.created_at


class TestReads:
    def test_read_all_empty(self, repo):
        assert repo.read_all() == []
        assert repo.count() == 0

    def test_read_all_strictly_descending_by_id(self, repo):
        for i in range(4):
            repo.create(UserInput(last_name=f"N{i}", first_name="P", email=f"{i}@example.com"))
        repo.delete(repo.read_all()[1].id)

        ids = [record.id for record in repo.read_all()]
        assert all(a > b for a, b in zip(ids, ids[1:]))

    def test_count_matches_read_all(self, repo, dupont, martin):
        assert repo.count() == len(repo.read_all())
        repo.create(dupont)
        repo.create(martin)
        assert repo.count() == len(repo.read_all()) == 2
        repo.delete(repo.read_all()[0].id)
        assert repo.count() == len(repo.read_all()) == 1

    def test_read_one_missing_id_returns_none(self, repo, dupont):
        repo.create(dupont)
        assert repo.read_one(99999) is None

    def test_stats_counts_phones(self, repo, dupont):
        repo.create(dupont)
        repo.create(UserInput(last_name="Sans", first_name="Tel", email="sans@example.com"))

        stats = repo.stats()
        assert stats.total == 2
        assert stats.with_email == 2
        assert stats.with_phone == 1

    def test_stats_on_empty_table(self, repo):
        stats = repo.stats()
        assert (stats.total, stats.with_email, stats.with_phone) == (0, 0, 0)


class TestEmailExists:
    def test_true_after_create_false_after_delete(self, repo, dupont):
        assert repo.email_exists(dupont.email) is False

        created = repo.create(dupont)
        assert repo.email_exists(dupont.email) is True

        repo.delete(created.data.id)
        assert repo.email_exists(dupont.email) is False

    def test_excludes_own_record(self, repo, dupont):
        created = repo.create(dupont)

        assert repo.email_exists(dupont.email, exclude_id=created.data.id) is False
        assert repo.email_exists(dupont.email, exclude_id=created.data.id + 1) is True

    def test_is_case_sensitive(self, repo, dupont):
        repo.create(dupont)
        assert repo.email_exists(dupont.email.upper()) is False

    def test_compares_against_stored_form(self, repo):
        repo.create(UserInput(last_name="A", first_name="B", email="a&b@example.com"))
        assert repo.email_exists("a&b@example.com") is True


class TestUpdate:
    def test_round_trip_with_same_fields_sets_updated_at(self, repo, dupont):
        created = repo.create(dupont)
        before = repo.read_one(created.data.id)

        result = repo.update(created.data.id, dupont)
        after = repo.read_one(created.data.id)

        assert result
        assert (after.last_name, after.first_name, after.email, after.phone) == (
            before.last_name, before.first_name, before.email, before.phone,
        )
        assert after.created_at == before.created_at
        assert after.updated_at is not None
        assert after.updated_at >= after.created_at

    def test_update_changes_fields(self, repo, dupont):
        created = repo.create(dupont)

        result = repo.update(created.data.id, UserInput(
            last_name="Durand", first_name="Jeanne", email="jeanne@example.com", phone=None,
        ))

        assert result.data.last_name == "Durand"
        assert result.data.first_name == "Jeanne"
        assert result.data.email == "jeanne@example.com"
        assert result.data.phone is None

    def test_stored_values_fed_back_are_escaped_again(self, repo):
        created = repo.create(UserInput(
            last_name="O'Brien", first_name="Luc", email="luc@example.com",
        ))
        stored = repo.read_one(created.data.id)
        assert stored.last_name == "O&#039;Brien"

        repo.update(stored.id, UserInput(
            last_name=stored.last_name, first_name=stored.first_name, email=stored.email,
        ))

        assert repo.read_one(stored.id).last_name == "O&amp;#039;Brien"

    def test_raw_input_update_keeps_single_escaping(self, repo):
        raw = UserInput(last_name="O'Brien", first_name="Luc", email="luc@example.com")
        created = repo.create(raw)

        repo.update(created.data.id, raw)

        assert repo.read_one(created.data.id).last_name == "O&#039;Brien"

    def test_nonexistent_id_is_not_found_and_count_unchanged(self, repo, dupont):
        repo.create(dupont)
        before = repo.count()

        result = repo.update(99999, dupont)

        assert not result
        assert result.error_code == RecordErrorCode.NOT_FOUND
        assert repo.count() == before

    def test_taking_another_records_email_is_rejected(self, repo, dupont, martin):
        repo.create(dupont)
        second = repo.create(martin)

        result = repo.update(second.data.id, UserInput(
            last_name="Martin", first_name="Marie", email=dupont.email,
        ))

        assert result.error_code == RecordErrorCode.EMAIL_TAKEN
        assert repo.read_one(second.data.id).email == martin.email


class TestDelete:
    def test_delete_removes_row(self, repo, dupont):
        created = repo.create(dupont)

        assert repo.delete(created.data.id)
        assert repo.read_one(created.data.id) is None

    def test_scenario_delete_nonexistent_id(self, repo, dupont):
        repo.create(dupont)
        before = repo.count()

        result = repo.delete(99999)

        assert not result
        assert result.error_code == RecordErrorCode.NOT_FOUND
        assert repo.count() == before


class TestConnectionLoss:
    def test_operations_raise_storage_connection_error_when_closed(self, repo, db, dupont):
        db.close()

        with pytest.raises(StorageConnectionError):
            repo.read_all()
        with pytest.raises(StorageConnectionError):
            repo.create(dupont)
