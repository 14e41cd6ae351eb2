"""Tests for filter composition into bound-parameter queries."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from roundsapi.query.composer import FilterClause, check_identifier, compose
from roundsapi.query.transforms import FilterTransforms

TEMPLATE = """SELECT r.round_id FROM round r
WHERE r.status = :status
/*@filters@*/
/*@order@*/
LIMIT :page_size OFFSET :first_row_index"""

CLAUSES = [
    FilterClause("challengeName", "AND LOWER(r.name) LIKE :value", transform="contains"),
    FilterClause("statuses", "AND LOWER(r.status) IN (:value)", transform="lower"),
    FilterClause("types", "AND r.round_type_id IN (:value)", transform="roundTypeCode"),
    FilterClause("codingStartTimeBefore", "AND coding.start_time <= :value", transform="storeDate"),
]

TABLES = {
    "roundTypes": {"single round match": 1, "tournament round": 2, "long round": 10},
    "listTypeStatus": {"ACTIVE": "A", "UPCOMING": "F"},
}


@pytest.fixture
def transforms():
    return FilterTransforms(ZoneInfo("America/New_York"), TABLES)


class TestCompose:
    def test_absent_clauses_leave_no_text(self, transforms):
        composed = compose(TEMPLATE, CLAUSES, {}, transforms, params={"status": "A"})
        assert "LIKE" not in composed.sql
        assert "/*@" not in composed.sql
        assert composed.params == {"status": "A"}

    def test_value_is_bound_not_spliced(self, transforms):
        composed = compose(
            TEMPLATE, CLAUSES, {"challengeName": "SRM' OR 1=1"}, transforms
        )
        assert "AND LOWER(r.name) LIKE :challengeName" in composed.sql
        assert "OR 1=1" not in composed.sql
        assert composed.params["challengeName"] == "%srm' or 1=1%"

    def test_list_expands_one_bind_per_element(self, transforms):
        composed = compose(TEMPLATE, CLAUSES, {"statuses": ["F", " a "]}, transforms)
        assert "IN (:statuses_0, :statuses_1)" in composed.sql
        assert composed.params["statuses_0"] == "f"
        assert composed.params["statuses_1"] == "a"

    def test_type_labels_become_codes(self, transforms):
        composed = compose(
            TEMPLATE, CLAUSES, {"types": ["Single Round Match", "Long Round"]}, transforms
        )
        assert composed.params["types_0"] == 1
        assert composed.params["types_1"] == 10

    def test_dates_rendered_in_store_zone(self, transforms):
        instant = datetime(2020, 1, 1, 12, 0, tzinfo=timezone.utc)
        composed = compose(TEMPLATE, CLAUSES, {"codingStartTimeBefore": instant}, transforms)
        assert composed.params["codingStartTimeBefore"] == "2020-01-01 07:00:00"

    def test_clauses_and_together(self, transforms):
        composed = compose(
            TEMPLATE, CLAUSES, {"challengeName": "srm", "statuses": ["a"]}, transforms
        )
        assert "LIKE :challengeName\nAND LOWER(r.status) IN (:statuses_0)" in composed.sql

    def test_missing_marker_is_a_no_op(self):
        clause = FilterClause("x", "AND x = :value", marker="elsewhere")
        composed = compose("SELECT 1 /*@filters@*/", [clause], {"x": 1})
        assert composed.sql == "SELECT 1 "
        assert composed.params == {}

    def test_unused_binds_are_dropped(self):
        composed = compose("SELECT :a", [], {}, params={"a": 1, "b": 2})
        assert composed.params == {"a": 1}

    def test_order_by(self):
        composed = compose(TEMPLATE, [], {}, order_by=("registration_start_time", "DESC"))
        assert "ORDER BY registration_start_time desc" in composed.sql

    def test_order_by_rejects_bad_direction(self):
        with pytest.raises(ValueError):
            compose(TEMPLATE, [], {}, order_by=("round_id", "sideways"))


class TestFilterClause:
    def test_predicate_must_use_value(self):
        with pytest.raises(ValueError, match="no :value bind"):
            FilterClause.from_dict({"param": "x", "predicate": "AND x = 1"})

    def test_from_dict_defaults(self):
        clause = FilterClause.from_dict({"param": "x", "predicate": "AND x = :value"})
        assert clause.transform is None
        assert clause.marker == "filters"


class TestIdentifier:
    @pytest.mark.parametrize("name", ["round_id", "r.round_id", "_x1"])
    def test_accepts_identifiers(self, name):
        assert check_identifier(name) == name

    @pytest.mark.parametrize("name", ["round_id; DROP TABLE round", "1abc", "a.b.c", "x y", ""])
    def test_rejects_everything_else(self, name):
        with pytest.raises(ValueError):
            check_identifier(name)


class TestTransforms:
    def test_unknown_transform(self, transforms):
        with pytest.raises(ValueError, match="Unknown filter transform"):
            transforms("reverse", "x")

    def test_none_is_identity(self, transforms):
        assert transforms(None, 5) == 5

    def test_list_type_status(self, transforms):
        assert transforms("listTypeStatus", "UPCOMING") == "F"
