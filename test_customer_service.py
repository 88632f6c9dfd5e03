# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Customer Service: service, repository and rule-set tests
==========================================================
Run:  pytest test_customer_service.py -v
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from app.core.errors import InvalidCategoryError, InvalidSortError, StorageError
from app.models.domain import Category, Customer, CustomerFilter, PageRequest, SortOrder
from app.services.customer_service import EMAIL_NOT_UNIQUE, CustomerService
from app.services.query_builder import build_filter, build_page_request, parse_category, parse_sort
from app.services.validation import Rule, RuleSetValidator


def _names(customers):
    return sorted(f"{c.first_name} {c.last_name}" for c in customers)


def _errors(result):
    return {e.field: e.messages for e in result.errors}


# ═══════════════════════════════════════════════════════════════════════════
# QUERY BUILDER
# ═══════════════════════════════════════════════════════════════════════════
class TestQueryBuilder:
    def test_no_criteria_gives_empty_filter(self):
        assert build_filter().is_empty

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_ignored(self, name):
        assert build_filter(name=name).name is None

    @pytest.mark.parametrize("category", ["", " ", "All"])
    def test_blank_or_all_category_ignored(self, category):
        assert build_filter(category=category).category is None

    def test_category_parsed(self):
        assert build_filter(name="ann", category="B") == CustomerFilter(name="ann", category=Category.B)

    @pytest.mark.parametrize("value", ["a", "E", "all", "A "])
    def test_unknown_category_raises(self, value):
        with pytest.raises(InvalidCategoryError):
            parse_category(value)

    def test_page_defaults_to_first(self):
        pr = build_page_request(None, None, 25)
        assert (pr.page, pr.size, pr.offset, pr.sort) == (1, 25, 0, [])

    def test_page_derived_from_start(self):
        pr = build_page_request(None, 50, 25)
        assert pr.page == 3
        assert pr.offset == 50

    def test_explicit_page_wins_over_start(self):
        assert build_page_request(2, 100, 10).page == 2

    def test_parse_sort(self):
        orders = parse_sort('[{"property": "lastName", "direction": "desc"}, {"property": "id"}]')
        assert orders == [SortOrder(property="lastName", direction="DESC"),
                          SortOrder(property="id", direction="ASC")]

    @pytest.mark.parametrize("raw", [
        "not json",
        '[{"property": "password"}]',
        '[{"property": "lastName", "direction": "sideways"}]',
        '[{"direction": "ASC"}]',
        '"lastName"',
    ])
    def test_bad_sort_raises(self, raw):
        with pytest.raises(InvalidSortError):
            parse_sort(raw)


# ═══════════════════════════════════════════════════════════════════════════
# READ
# ═══════════════════════════════════════════════════════════════════════════
class TestRead:
    @pytest.fixture
    def people(self, add_customer):
        add_customer("Anna", "Lee", "anna@mail.com", "A")
        add_customer("Johanna", "Smith", "jo@mail.com", "B")
        add_customer("Bob", "Jones", "bob@mail.com", "A")
        add_customer("Carl", "Hannover", None, "C")

    def test_unfiltered_returns_everything(self, service, people, repo):
        total, items = service.read(CustomerFilter(), PageRequest(page=1, size=50))
        assert total == repo.count() == 4
        assert len(items) == 4

    def test_page_slicing(self, service, people):
        total, items = service.read(CustomerFilter(), PageRequest(page=2, size=3))
        assert total == 4
        assert len(items) == 1
        assert items[0].first_name == "Carl"

    def test_name_filter_case_insensitive_on_either_name(self, service, people):
        total, items = service.read(build_filter(name="ANN"), PageRequest(size=50))
        assert total == 3
        assert _names(items) == ["Anna Lee", "Carl Hannover", "Johanna Smith"]

    def test_name_filter_excludes_non_matching(self, service, add_customer):
        add_customer("Anna", "Lee")
        add_customer("Johanna", "Smith")
        add_customer("Bob", "Jones")
        total, items = service.read(build_filter(name="ann"), PageRequest(size=50))
        assert total == 2
        assert "Bob Jones" not in _names(items)

    def test_category_filter(self, service, people):
        total, items = service.read(build_filter(category="A"), PageRequest(size=50))
        assert total == 2
        assert {c.category for c in items} == {"A"}

    def test_all_category_equals_no_filter(self, service, people):
        unfiltered = service.read(build_filter(), PageRequest(size=50))
        everything = service.read(build_filter(category="All"), PageRequest(size=50))
        assert unfiltered == everything

    def test_filters_combine_with_and(self, service, people):
        total, items = service.read(build_filter(name="ann", category="A"), PageRequest(size=50))
        assert total == 1
        assert _names(items) == ["Anna Lee"]

    def test_like_wildcards_matched_literally(self, service, add_customer):
        add_customer("100%", "Real")
        add_customer("Plain", "Name")
        total, items = service.read(build_filter(name="%"), PageRequest(size=50))
        assert total == 1
        assert items[0].first_name == "100%"

    def test_non_ascii_filter_matches_same_case(self, service, add_customer):
        add_customer("Äsa", "Öberg")
        add_customer("Asa", "Berg")
        total, items = service.read(build_filter(name="Äsa"), PageRequest(size=50))
        assert total == 1
        assert items[0].last_name == "Öberg"

    def test_sort(self, service, people):
        pr = build_page_request(1, None, 50, '[{"property": "lastName", "direction": "DESC"}]')
        _, items = service.read(CustomerFilter(), pr)
        assert [c.last_name for c in items] == ["Smith", "Lee", "Jones", "Hannover"]


# ═══════════════════════════════════════════════════════════════════════════
# FIELD RULES
# ═══════════════════════════════════════════════════════════════════════════
class TestRuleSet:
    def test_valid_customer_has_no_errors(self):
        c = Customer(first_name="Anna", last_name="Lee", email="anna@mail.com", category="A")
        assert RuleSetValidator().validate(c) == []

    def test_missing_names(self):
        errors = RuleSetValidator().validate(Customer(last_name="  "))
        assert {e.field for e in errors} == {"firstName", "lastName"}

    def test_messages_grouped_per_field(self):
        rules = [
            Rule("email", lambda v: False, "first"),
            Rule("firstName", lambda v: False, "other"),
            Rule("email", lambda v: False, "second"),
        ]
        errors = RuleSetValidator(rules).validate(Customer())
        assert [(e.field, e.messages) for e in errors] == [
            ("email", ["first", "second"]), ("firstName", ["other"]),
        ]

    def test_malformed_email(self):
        c = Customer(first_name="A", last_name="B", email="not-an-address")
        errors = RuleSetValidator().validate(c)
        assert [(e.field, e.messages) for e in errors] == [
            ("email", ["not a well-formed email address"]),
        ]

    def test_too_long_name(self):
        c = Customer(first_name="x" * 256, last_name="B")
        errors = RuleSetValidator().validate(c)
        assert errors[0].field == "firstName"
        assert errors[0].messages == ["size must be between 0 and 255"]

    def test_unknown_category(self):
        c = Customer(first_name="A", last_name="B", category="Z")
        errors = RuleSetValidator().validate(c)
        assert errors[0].field == "category"


# ═══════════════════════════════════════════════════════════════════════════
# CREATE / UPDATE
# ═══════════════════════════════════════════════════════════════════════════
class TestCreate:
    def test_create_assigns_id(self, service, repo):
        result = service.create(Customer(first_name="Anna", last_name="Lee",
                                         email="anna@mail.com", category="A"))
        assert result.valid
        assert result.entity.id is not None
        assert repo.find_by_id(result.entity.id).email == "anna@mail.com"

    def test_invalid_never_persists(self, service, repo):
        result = service.create(Customer(first_name="", email="broken", category="X"))
        assert not result.valid
        assert set(_errors(result)) == {"firstName", "lastName", "email", "category"}
        assert result.entity.id is None
        assert repo.count() == 0

    def test_duplicate_email_rejected(self, service, repo):
        assert service.create(Customer(first_name="A", last_name="B", email="dup@mail.com")).valid
        second = service.create(Customer(first_name="C", last_name="D", email="DUP@mail.com"))
        assert not second.valid
        assert _errors(second) == {"email": [EMAIL_NOT_UNIQUE]}
        assert repo.count() == 1

    def test_rule_and_uniqueness_errors_are_concatenated(self, service, add_customer):
        add_customer(email="taken@mail.com")
        result = service.create(Customer(last_name="B", email="taken@mail.com"))
        assert [e.field for e in result.errors] == ["firstName", "email"]

    def test_blank_emails_do_not_collide(self, service, repo):
        assert service.create(Customer(first_name="A", last_name="B", email="")).valid
        second = service.create(Customer(first_name="C", last_name="D", email="  "))
        assert second.valid
        assert second.entity.email is None
        assert repo.count() == 2

    def test_storage_backstop_rejects_duplicate(self, repo, add_customer):
        # Two writers that both passed the uniqueness check race to storage.
        add_customer(email="race@mail.com")
        with pytest.raises(StorageError):
            add_customer(email="Race@mail.com")


class TestUpdate:
    def test_update_keeps_identity(self, service, add_customer, repo):
        existing = add_customer("Anna", "Lee", "anna@mail.com", "A")
        changed = existing.model_copy(update={"last_name": "Lee-Smith", "category": "B"})
        result = service.update(changed)
        assert result.valid
        assert result.entity.id == existing.id
        stored = repo.find_by_id(existing.id)
        assert (stored.last_name, stored.category) == ("Lee-Smith", "B")

    def test_own_email_is_not_a_duplicate(self, service, add_customer):
        existing = add_customer(email="me@mail.com")
        assert service.update(existing).valid

    def test_other_customers_email_rejected(self, service, add_customer, repo):
        add_customer(email="first@mail.com")
        second = add_customer(email="second@mail.com")
        result = service.update(second.model_copy(update={"email": "first@mail.com"}))
        assert _errors(result) == {"email": [EMAIL_NOT_UNIQUE]}
        assert repo.find_by_id(second.id).email == "second@mail.com"

    def test_update_is_idempotent(self, service, add_customer, repo):
        existing = add_customer("Anna", "Lee", "anna@mail.com", "A")
        payload = existing.model_copy(update={"first_name": "Annie"})
        first = service.update(payload)
        state_after_first = repo.find_by_id(existing.id)
        second = service.update(payload)
        assert first.valid and second.valid
        assert repo.find_by_id(existing.id) == state_after_first
        assert repo.count() == 1

    def test_update_of_missing_customer_is_storage_failure(self, service):
        with pytest.raises(StorageError):
            service.update(Customer(id=999, first_name="A", last_name="B"))


# ═══════════════════════════════════════════════════════════════════════════
# DESTROY
# ═══════════════════════════════════════════════════════════════════════════
class TestDestroy:
    def test_destroy_removes(self, service, add_customer, repo):
        existing = add_customer()
        service.destroy(existing)
        assert repo.find_by_id(existing.id) is None

    def test_destroy_missing_propagates(self, service):
        with pytest.raises(StorageError):
            service.destroy(Customer(id=12345))

    def test_destroy_without_id_propagates(self, service):
        with pytest.raises(StorageError):
            service.destroy(Customer())

    def test_lookup_failure_propagates(self):
        repo = MagicMock()
        repo.find_by_email.side_effect = StorageError("connection lost")
        with pytest.raises(StorageError):
            CustomerService(repo).create(Customer(first_name="A", last_name="B", email="a@mail.com"))
        repo.save.assert_not_called()


# ═══════════════════════════════════════════════════════════════════════════
# CATEGORY REPORT
# ═══════════════════════════════════════════════════════════════════════════
class TestCategoryReport:
    def test_seventy_thirty(self, service, add_customer):
        for i in range(7):
            add_customer(f"A{i}", "X", category="A")
        for i in range(3):
            add_customer(f"B{i}", "X", category="B")
        report = {cd.category: cd.percentage for cd in service.category_report()}
        assert report == {"A": Decimal("70.00"), "B": Decimal("30.00")}
        assert str(report["A"]) == "70.00"

    def test_empty_table_gives_empty_report(self, service):
        assert service.category_report() == []

    def test_uncategorised_count_towards_total_only(self, service, add_customer):
        add_customer("A", "X", category="A")
        add_customer("B", "X", category="B")
        add_customer("N", "X", category=None)
        report = {cd.category: cd.percentage for cd in service.category_report()}
        assert report == {"A": Decimal("33.33"), "B": Decimal("33.33")}

    def test_round_half_up(self):
        repo = MagicMock()
        repo.count.return_value = 20000
        repo.count_by_category.return_value = [(None, 0), ("A", 1), ("C", 19999)]
        report = CustomerService(repo).category_report()
        assert [(cd.category, cd.percentage) for cd in report] == [
            ("A", Decimal("0.01")), ("C", Decimal("100.00")),
        ]

    def test_two_thirds(self, service, add_customer):
        add_customer("A", "X", category="D")
        add_customer("B", "X", category="D")
        add_customer("C", "X", category="A")
        report = {cd.category: cd.percentage for cd in service.category_report()}
        assert report == {"A": Decimal("33.33"), "D": Decimal("66.67")}
