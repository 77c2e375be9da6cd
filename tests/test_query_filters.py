from datetime import datetime

import pytest

from backend.app.services.query_filters import (
    DEFAULT_SORT,
    FilterClause,
    apply_filters,
    apply_sort,
    parse_list_query,
)
from backend.app.utils.error_handlers import ValidationError


def test_control_keys_are_not_filters():
    q = parse_list_query([
        ("select", "full_name,email"),
        ("sort", "-experience,full_name"),
        ("page", "2"),
        ("limit", "10"),
        ("status", "ongoing"),
    ])
    assert q.clauses == [FilterClause("status", "eq", "ongoing")]
    assert q.select == ("id", "full_name", "email")
    assert q.sort == (("experience", True), ("full_name", False))
    assert q.page == "2"
    assert q.limit == "10"


def test_defaults_when_no_controls():
    q = parse_list_query([])
    assert q.clauses == []
    assert q.select is None
    assert q.sort == DEFAULT_SORT
    assert q.page is None and q.limit is None


def test_bracket_operator_becomes_comparison_with_coerced_value():
    q = parse_list_query([("experience[gte]", "3")])
    assert q.clauses == [FilterClause("experience", "gte", 3)]


def test_in_operator_splits_values():
    q = parse_list_query([("status[in]", "selected, scheduled")])
    assert q.clauses == [FilterClause("status", "in", ["selected", "scheduled"])]


def test_operator_words_inside_values_are_left_alone():
    q = parse_list_query([("notes", "gt lte in"), ("position", "Login Engineer")])
    assert q.clauses == [
        FilterClause("notes", "eq", "gt lte in"),
        FilterClause("position", "eq", "Login Engineer"),
    ]


def test_datetime_filter_is_parsed():
    q = parse_list_query([("interview_date[lt]", "2024-05-01T10:00:00Z")])
    clause = q.clauses[0]
    assert clause.op == "lt"
    assert isinstance(clause.value, datetime)
    assert clause.value.year == 2024


def test_datetime_filter_is_normalized_to_utc():
    q = parse_list_query([("interview_date[gte]", "2026-01-01T10:00:00+05:00")])
    assert q.clauses == [FilterClause("interview_date", "gte", datetime(2026, 1, 1, 5, 0))]


def test_email_filter_is_lowercased():
    q = parse_list_query([("email", " Foo@X.com "), ("email[in]", "A@X.com,b@x.com")])
    assert q.clauses == [
        FilterClause("email", "eq", "foo@x.com"),
        FilterClause("email", "in", ["a@x.com", "b@x.com"]),
    ]


def test_empty_select_means_all_fields():
    assert parse_list_query([("select", "")]).select is None
    assert parse_list_query([("select", " , ")]).select is None


@pytest.mark.parametrize(
    "key, value",
    [
        ("salary", "10"),               # unknown field
        ("experience[ne]", "1"),        # unsupported operator
        ("experience[gte]", "three"),   # not an integer
        ("interview_date", "tomorrow"),
        ("status[in]", " , "),
        ("experience[gte", "3"),        # malformed key
        ("resume_file", "x"),           # binary content is not filterable
    ],
)
def test_malformed_filters_are_client_errors(key, value):
    with pytest.raises(ValidationError) as exc:
        parse_list_query([(key, value)])
    assert exc.value.status_code == 400
    assert exc.value.code == "invalid_filter"


def test_unknown_select_and_sort_fields_rejected():
    with pytest.raises(ValidationError):
        parse_list_query([("select", "full_name,password")])
    with pytest.raises(ValidationError):
        parse_list_query([("sort", "-password")])


def _seed(db_session, user_id):
    from backend.app.models.candidate import Candidate

    rows = [
        Candidate(full_name="Ann", email="ann@example.com", position="Backend Engineer",
                  experience=1, status="ongoing", created_by=user_id),
        Candidate(full_name="Bob", email="bob@example.com", position="Data Analyst",
                  experience=3, status="selected", created_by=user_id),
        Candidate(full_name="Cid", email="cid@example.com", position="Backend Engineer",
                  experience=7, status="scheduled", created_by=user_id),
    ]
    db_session.add_all(rows)
    db_session.commit()


def test_apply_filters_against_database(db_session, recruiter):
    from backend.app.models.candidate import Candidate

    user, _ = recruiter
    _seed(db_session, user.id)

    q = parse_list_query([("experience[gte]", "3")])
    names = {c.full_name for c in apply_filters(db_session.query(Candidate), q.clauses)}
    assert names == {"Bob", "Cid"}

    q = parse_list_query([("experience[gt]", "1"), ("experience[lte]", "3")])
    names = {c.full_name for c in apply_filters(db_session.query(Candidate), q.clauses)}
    assert names == {"Bob"}

    q = parse_list_query([("status[in]", "ongoing,scheduled")])
    names = {c.full_name for c in apply_filters(db_session.query(Candidate), q.clauses)}
    assert names == {"Ann", "Cid"}


def test_apply_sort_orders_rows(db_session, recruiter):
    from backend.app.models.candidate import Candidate

    user, _ = recruiter
    _seed(db_session, user.id)

    q = parse_list_query([("sort", "-experience")])
    names = [c.full_name for c in apply_sort(db_session.query(Candidate), q.sort)]
    assert names == ["Cid", "Bob", "Ann"]

    q = parse_list_query([("sort", "position,full_name")])
    names = [c.full_name for c in apply_sort(db_session.query(Candidate), q.sort)]
    assert names == ["Ann", "Cid", "Bob"]
