import random
import typing as t
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

import pytest

from registrations.service.form_filters import is_filled, should_display
from registrations.service.form_schema import (
    FieldCondition,
    FieldSchema,
    OptionList,
    TicketCondition,
    UnknownCondition,
    parse_filter,
)

TICKET_ID = "7b0c1c9e-8d0d-4a58-9a51-2d2b8f1b0a11"
OTHER_TICKET_ID = "0e5b4f53-2f6c-4f1f-8f0a-64f2d0f54e22"
NOW = datetime(2026, 5, 1, 12, 0, tzinfo=dt_timezone.utc)


def make_field(field_id: str, filters: dict[str, t.Any] | None = None, **kwargs: t.Any) -> FieldSchema:
    return FieldSchema(id=field_id, type=kwargs.pop("type", "text"), filters=parse_filter(filters), **kwargs)


def show_when(*conditions: dict[str, t.Any], action: str = "display", operator: str = "and") -> dict[str, t.Any]:
    return {"enabled": True, "action": action, "operator": operator, "conditions": list(conditions)}


class TestIsFilled:
    @pytest.mark.parametrize("value", [None, "", []])
    def test_empty_values(self, value: t.Any) -> None:
        assert is_filled(value) is False

    @pytest.mark.parametrize("value", ["x", " ", ["a"], 0, False, {"a": 1}])
    def test_filled_values(self, value: t.Any) -> None:
        assert is_filled(value) is True


class TestShouldDisplay:
    def test_field_without_filter_is_displayed(self) -> None:
        field = make_field("a")
        assert should_display(field, TICKET_ID, {}, [field], now=NOW) is True

    def test_disabled_filter_is_ignored(self) -> None:
        field = make_field("a", {"enabled": False, "conditions": [{"type": "ticket", "ticketId": OTHER_TICKET_ID}]})
        assert should_display(field, TICKET_ID, {}, [field], now=NOW) is True

    def test_ticket_condition(self) -> None:
        field = make_field("a", show_when({"type": "ticket", "ticketId": TICKET_ID}))
        assert should_display(field, TICKET_ID, {}, [field], now=NOW) is True
        assert should_display(field, OTHER_TICKET_ID, {}, [field], now=NOW) is False

    def test_ticket_condition_without_id_is_true(self) -> None:
        field = make_field("a", show_when({"type": "ticket"}))
        assert should_display(field, OTHER_TICKET_ID, {}, [field], now=NOW) is True

    @pytest.mark.parametrize(
        "operator, value, expected",
        [
            ("filled", "something", True),
            ("filled", "", False),
            ("filled", [], False),
            ("notFilled", None, True),
            ("notFilled", "x", False),
            ("equals", "yes", True),
            ("equals", "no", False),
        ],
    )
    def test_field_condition_operators(self, operator: str, value: t.Any, expected: bool) -> None:
        source = make_field("source")
        target = make_field(
            "target", show_when({"type": "field", "fieldId": "source", "operator": operator, "value": "yes"})
        )
        form_data = {} if value is None else {"source": value}
        assert should_display(target, TICKET_ID, form_data, [source, target], now=NOW) is expected

    def test_equals_compares_string_forms(self) -> None:
        source = make_field("source", type="checkbox")
        target = make_field("target", show_when({"type": "field", "fieldId": "source", "value": "a,b"}))
        assert should_display(target, TICKET_ID, {"source": ["a", "b"]}, [source, target], now=NOW) is True

        flag = make_field("flag")
        gated = make_field("gated", show_when({"type": "field", "fieldId": "flag", "value": "true"}))
        assert should_display(gated, TICKET_ID, {"flag": True}, [flag, gated], now=NOW) is True

    @pytest.mark.parametrize("field_id", [None, "does-not-exist"])
    def test_unknown_field_reference_is_true(self, field_id: str | None) -> None:
        target = make_field("target", show_when({"type": "field", "fieldId": field_id, "operator": "filled"}))
        assert should_display(target, TICKET_ID, {}, [target], now=NOW) is True

    def test_time_condition(self) -> None:
        window = {
            "type": "time",
            "startTime": (NOW - timedelta(hours=1)).isoformat(),
            "endTime": (NOW + timedelta(hours=1)).isoformat(),
        }
        field = make_field("a", show_when(window))
        assert should_display(field, TICKET_ID, {}, [field], now=NOW) is True
        assert should_display(field, TICKET_ID, {}, [field], now=NOW + timedelta(hours=2)) is False
        assert should_display(field, TICKET_ID, {}, [field], now=NOW - timedelta(hours=2)) is False

    def test_time_condition_with_open_end(self) -> None:
        field = make_field("a", show_when({"type": "time", "startTime": NOW.isoformat()}))
        assert should_display(field, TICKET_ID, {}, [field], now=NOW + timedelta(days=365)) is True

    def test_hide_inverts(self) -> None:
        field = make_field("a", show_when({"type": "ticket", "ticketId": TICKET_ID}, action="hide"))
        assert should_display(field, TICKET_ID, {}, [field], now=NOW) is False
        assert should_display(field, OTHER_TICKET_ID, {}, [field], now=NOW) is True

    def test_and_requires_every_condition(self) -> None:
        source = make_field("source")
        field = make_field(
            "a",
            show_when(
                {"type": "ticket", "ticketId": TICKET_ID},
                {"type": "field", "fieldId": "source", "operator": "filled"},
            ),
        )
        assert should_display(field, TICKET_ID, {"source": "x"}, [source, field], now=NOW) is True
        assert should_display(field, TICKET_ID, {}, [source, field], now=NOW) is False

    def test_or_requires_any_condition(self) -> None:
        source = make_field("source")
        field = make_field(
            "a",
            show_when(
                {"type": "ticket", "ticketId": OTHER_TICKET_ID},
                {"type": "field", "fieldId": "source", "operator": "filled"},
                operator="or",
            ),
        )
        assert should_display(field, TICKET_ID, {"source": "x"}, [source, field], now=NOW) is True
        assert should_display(field, TICKET_ID, {}, [source, field], now=NOW) is False

    @pytest.mark.parametrize("operator, expected", [("and", True), ("or", False)])
    def test_empty_condition_list(self, operator: str, expected: bool) -> None:
        field = make_field("a", show_when(operator=operator))
        assert should_display(field, TICKET_ID, {}, [field], now=NOW) is expected

    def test_field_declared_later_can_drive_earlier_field(self) -> None:
        early = make_field("early", show_when({"type": "field", "fieldId": "late", "value": "yes"}))
        late = make_field("late")
        assert should_display(early, TICKET_ID, {"late": "yes"}, [early, late], now=NOW) is True

    def test_outcome_does_not_depend_on_field_order(self) -> None:
        fields = [
            make_field("a"),
            make_field("b", show_when({"type": "field", "fieldId": "a", "value": "yes"})),
            make_field("c", show_when({"type": "field", "fieldId": "b", "operator": "filled"}, action="hide")),
            make_field("d", show_when({"type": "ticket", "ticketId": TICKET_ID}, operator="or")),
        ]
        form_data = {"a": "yes", "b": "", "c": "something"}
        baseline = {f.id: should_display(f, TICKET_ID, form_data, fields, now=NOW) for f in fields}

        shuffled = fields[:]
        for seed in range(5):
            random.Random(seed).shuffle(shuffled)
            result = {f.id: should_display(f, TICKET_ID, form_data, shuffled, now=NOW) for f in shuffled}
            assert result == baseline


class TestParseFilter:
    def test_accepts_camel_and_snake_case(self) -> None:
        parsed = parse_filter(
            {
                "enabled": True,
                "conditions": [
                    {"type": "ticket", "ticketId": TICKET_ID},
                    {"type": "field", "field_id": "x", "operator": "filled"},
                ],
            }
        )
        assert parsed is not None
        ticket_condition, field_condition = parsed.conditions
        assert isinstance(ticket_condition, TicketCondition)
        assert ticket_condition.ticket_id == TICKET_ID
        assert isinstance(field_condition, FieldCondition)
        assert field_condition.field_id == "x"

    def test_defaults(self) -> None:
        parsed = parse_filter({"enabled": True, "conditions": []})
        assert parsed is not None
        assert parsed.action == "display"
        assert parsed.operator == "and"

    def test_json_string_is_parsed(self) -> None:
        parsed = parse_filter('{"enabled": true, "action": "hide", "conditions": []}')
        assert parsed is not None
        assert parsed.action == "hide"

    def test_unreadable_condition_becomes_unknown_and_passes(self) -> None:
        parsed = parse_filter({"enabled": True, "conditions": [{"type": "weather", "value": "sunny"}]})
        assert parsed is not None
        assert isinstance(parsed.conditions[0], UnknownCondition)

        field = FieldSchema(id="a", type="text", filters=parsed)
        assert should_display(field, TICKET_ID, {}, [field], now=NOW) is True

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_filter_is_none(self, raw: str | None) -> None:
        assert parse_filter(raw) is None


class TestOptionList:
    def test_plain_strings(self) -> None:
        options = OptionList.parse(["red", "green"])
        assert options.values == ("red", "green")
        assert "red" in options

    def test_objects_with_value(self) -> None:
        options = OptionList.parse([{"value": "vg", "en": "Vegetarian"}, {"value": "vn", "en": "Vegan"}])
        assert options.values == ("vg", "vn")

    def test_localized_labels_without_value(self) -> None:
        options = OptionList.parse([{"en": "Yes", "zh-Hant": "是"}])
        assert options.values == ("Yes", "是")

    def test_json_string(self) -> None:
        options = OptionList.parse('["a", "b"]')
        assert options.values == ("a", "b")

    def test_not_a_list(self) -> None:
        with pytest.raises(ValueError):
            OptionList.parse({"a": 1})
