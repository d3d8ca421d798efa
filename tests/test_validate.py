"""
Contract validation tests.

validate_params() must report every violation of every param in one call,
fill defaults before checking, and never raise for bad params.
"""

import pytest

from paramchain.contracts import (
    Contract,
    ContractViolation,
    CustomCheck,
    FuncSignature,
    validate_or_raise,
    validate_params,
)


class TestAggregation:
    """All failures are collected, nothing stops early."""

    def test_valid_params(self, user_declarations):
        outcome = validate_params(user_declarations, {"name": "Ann", "age": 37})

        assert outcome.is_valid
        assert outcome.errors == {}
        assert outcome.params == {"name": "Ann", "age": 37, "role": "user"}

    def test_two_violated_params_reported_together(self, user_declarations):
        outcome = validate_params(user_declarations, {"name": "", "age": 12})

        assert not outcome.is_valid
        assert outcome.errors == {
            "name": ["length must be greater than or equal to 1"],
            "age": ["must be greater than or equal to 18"],
        }

    def test_multiple_messages_for_one_param(self):
        contract = [("code", {"type": "string", "length": {"min": 5}, "format": r"^\d+$"})]

        outcome = validate_params(contract, {"code": "ab"})

        assert outcome.errors == {"code": [
            "has invalid format",
            "length must be greater than or equal to 5",
        ]}

    def test_numericality_list_is_flattened(self):
        contract = [("n", {"numericality": {"gt": 10, "lt": 0}})]

        outcome = validate_params(contract, {"n": 5})

        assert outcome.errors == {"n": ["must be greater than 10", "must be less than 0"]}

    def test_keyword_list_params(self, user_declarations):
        outcome = validate_params(user_declarations, [("name", "Ann"), ("age", 40)])

        assert outcome.is_valid
        assert outcome.params == {"name": "Ann", "age": 40, "role": "user"}

    def test_input_is_not_mutated(self, user_declarations):
        params = {"name": "Ann", "age": 37}
        validate_params(user_declarations, params)
        assert params == {"name": "Ann", "age": 37}

    def test_undeclared_params_pass_through(self):
        outcome = validate_params([("a", {"type": "integer"})], {"a": 1, "extra": "x"})
        assert outcome.params == {"a": 1, "extra": "x"}


class TestRequired:
    """required defaults to settings.default_required."""

    def test_missing_required_param(self, user_declarations):
        outcome = validate_params(user_declarations, {"name": "Ann"})
        assert outcome.errors == {"age": ["is required"]}

    def test_missing_param_only_reports_required(self):
        contract = [("a", {"required": True, "type": "integer", "length": {"min": 1}, "in": [1]})]
        assert validate_params(contract, {}).errors == {"a": ["is required"]}

    def test_present_none_satisfies_required(self):
        outcome = validate_params([("a", {"required": True})], {"a": None})
        assert outcome.is_valid

    def test_optional_missing_param_skips_checks(self):
        contract = [("a", {"required": False, "in": [1, 2], "allow_nil": False})]
        assert validate_params(contract, {}).is_valid

    def test_default_required_setting(self, restore_settings):
        contract = [("a", {"type": "integer"})]

        restore_settings.default_required = False
        assert validate_params(contract, {}).is_valid

        restore_settings.default_required = True
        assert validate_params(contract, {}).errors == {"a": ["is required"]}

    def test_default_required_argument(self):
        contract = [("a", {"type": "integer"})]
        assert validate_params(contract, {}, default_required=False).is_valid


class TestDefaults:
    """Defaults are filled before the other checks run."""

    def test_default_fills_missing_param(self):
        outcome = validate_params([("page", {"default": 1, "type": "integer"})], {})
        assert outcome.params == {"page": 1}

    def test_default_does_not_override_present_value(self):
        outcome = validate_params([("page", {"default": 1})], {"page": None, "x": 2})
        assert outcome.params == {"page": None, "x": 2}

    def test_defaulted_value_is_still_checked(self):
        contract = [("page", {"default": "one", "type": "integer", "numericality": {"gt": 0}})]

        outcome = validate_params(contract, {})

        assert outcome.errors == {"page": ["has wrong type", "not a number"]}

    def test_mutable_default_is_not_shared(self):
        contract = Contract.from_declarations([("tags", {"default": []})])

        first = validate_params(contract, {})
        first.params["tags"].append("x")
        second = validate_params(contract, {})

        assert second.params == {"tags": []}


class TestAllowNil:
    """allow_nil=True lets None through, allow_nil=False rejects it."""

    def test_allow_nil_skips_other_checks(self):
        contract = [("a", {"type": "integer", "allow_nil": True, "numericality": {"gt": 0}})]
        assert validate_params(contract, {"a": None}).is_valid

    def test_allow_nil_still_checks_real_values(self):
        contract = [("a", {"type": "integer", "allow_nil": True})]
        assert validate_params(contract, {"a": "x"}).errors == {"a": ["has wrong type"]}

    def test_disallowed_nil(self):
        contract = [("a", {"allow_nil": False})]
        assert validate_params(contract, {"a": None}).errors == {"a": ["doesn't allow nil"]}


class TestOtherChecks:
    """Each option kind is wired to its check."""

    def test_in_and_not_in(self):
        contract = [("a", {"in": [1, 2]}), ("b", {"not_in": ["x"]})]
        outcome = validate_params(contract, {"a": 3, "b": "x"})
        assert outcome.errors == {
            "a": ["must be one of [1, 2]"],
            "b": ["must not be included in ['x']"],
        }

    def test_regex_alias(self):
        outcome = validate_params([("a", {"regex": r"^a"})], {"a": "ba"})
        assert outcome.errors == {"a": ["has invalid format"]}

    def test_equals_and_exactly(self):
        contract = [("a", {"equals": 1}), ("b", {"exactly": "x"})]
        outcome = validate_params(contract, {"a": 1.0, "b": "x"})
        assert outcome.errors == {"a": ["must be equal to 1"]}

    def test_func_with_signatures(self):
        contract = [
            ("start", {"type": "integer"}),
            ("end", {"func": CustomCheck(
                lambda params, value: value > params["start"] or ("error", "must be after start"),
                FuncSignature.PARAMS_VALUE,
            )}),
        ]
        assert validate_params(contract, {"start": 1, "end": 5}).is_valid
        assert validate_params(contract, {"start": 9, "end": 5}).errors == {"end": ["must be after start"]}

    def test_bare_func_receives_value(self):
        contract = [("a", {"func": lambda value: value % 2 == 0})]
        assert validate_params(contract, {"a": 3}).errors == {"a": ["isn't valid"]}

    def test_unknown_numericality_names_pass(self):
        contract = [("a", {"numericality": {"gt": 0, "odd": True}})]
        assert validate_params(contract, {"a": 3}).is_valid
        assert validate_params(contract, {"a": -3}).errors == {"a": ["must be greater than 0"]}

    def test_nil_length_is_its_name(self):
        contract = [("a", {"length": {"min": 1, "max": 3}})]
        assert validate_params(contract, {"a": None}).errors == {"a": ["length must be less than or equal to 3"]}

    def test_unknown_options_are_ignored(self):
        contract = [("a", {"type": "integer", "coerce_with": str, "description": "x"})]
        assert validate_params(contract, {"a": 1}).is_valid


class TestInner:
    """inner contracts validate nested maps recursively."""

    @pytest.fixture
    def contract(self):
        return [
            ("user", {
                "inner": {
                    "name": {"type": "string"},
                    "age": {"type": "integer", "default": 30},
                },
            }),
        ]

    def test_nested_valid(self, contract):
        outcome = validate_params(contract, {"user": {"name": "Ann"}})

        assert outcome.is_valid
        assert outcome.params == {"user": {"name": "Ann", "age": 30}}

    def test_nested_failures_use_qualified_names(self, contract):
        outcome = validate_params(contract, {"user": {"age": "old"}})

        assert outcome.errors == {
            "user.name": ["is required"],
            "user.age": ["has wrong type"],
        }

    def test_nested_keyword_list(self, contract):
        outcome = validate_params(contract, {"user": [("name", "Ann")]})
        assert outcome.params == {"user": {"name": "Ann", "age": 30}}

    def test_non_map_value(self, contract):
        outcome = validate_params(contract, {"user": 5})
        assert outcome.errors == {"user": ["has wrong type"]}

    def test_inner_accepts_a_contract(self):
        inner = Contract.from_declarations([("id", {"type": "uuid"})])
        outcome = validate_params([("ref", {"inner": inner})], {"ref": {"id": "nope"}})
        assert outcome.errors == {"ref.id": ["has wrong type"]}


class TestRaising:
    """validate_or_raise() / ContractViolation"""

    def test_returns_params_when_valid(self, user_declarations):
        assert validate_or_raise(user_declarations, {"name": "Ann", "age": 20})["role"] == "user"

    def test_raises_with_all_errors(self, user_declarations):
        with pytest.raises(ContractViolation) as exc:
            validate_or_raise(user_declarations, {"age": 1})

        assert str(exc.value) == "2 param validation error(s)"
        assert exc.value.errors == {
            "name": ["is required"],
            "age": ["must be greater than or equal to 18"],
        }
        assert exc.value.to_dict()["errors"]["age"] == ["must be greater than or equal to 18"]
