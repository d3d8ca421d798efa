"""
Contract definition tests.

Malformed declarations must fail when the contract is built, with a
ContractDefinitionError naming the bad option.
"""

import dataclasses
import re

import pytest
from pydantic import ValidationError

from paramchain.contracts import Contract, ContractBuilder, ContractDefinitionError, CustomCheck
from paramchain.contracts.options import ParamOptions, parse_declarations
from paramchain.contracts.types import FuncSignature, TypeKind


class TestParamOptions:
    """Option parsing and normalization."""

    def test_known_type_becomes_enum(self):
        assert ParamOptions.model_validate({"type": "Integer"}).type is TypeKind.INTEGER

    def test_unknown_type_is_kept(self):
        assert ParamOptions.model_validate({"type": "decimal"}).type == "decimal"

    def test_in_alias(self):
        by_alias = ParamOptions.model_validate({"in": [1, 2]})
        by_name = ParamOptions.model_validate({"in_": [1, 2]})

        assert by_alias.in_ == by_name.in_ == [1, 2]
        assert by_alias.declared("in")
        assert by_alias.get("in") == [1, 2]

    def test_regex_alias(self):
        options = ParamOptions.model_validate({"regex": r"^\d+$"})
        assert isinstance(options.format, re.Pattern)
        assert options.declared("format")

    def test_precompiled_pattern_is_kept(self):
        pattern = re.compile("x")
        assert ParamOptions.model_validate({"format": pattern}).format is pattern

    def test_func_is_wrapped(self):
        options = ParamOptions.model_validate({"func": len})
        assert isinstance(options.func, CustomCheck)
        assert options.func.signature is FuncSignature.VALUE

    def test_constraint_maps_become_pairs(self):
        options = ParamOptions.model_validate({"numericality": {"gt": 1}, "length": {"in": range(1, 4)}})
        assert options.numericality == (("gt", 1),)
        assert options.length == (("in", range(1, 4)),)

    def test_unknown_options_are_ignored(self):
        options = ParamOptions.model_validate({"type": "string", "coerce": True})
        assert not hasattr(options, "coerce")

    def test_undeclared_options_are_not_declared(self):
        options = ParamOptions.model_validate({"type": "string"})
        assert options.declared("type")
        assert not options.declared("default")
        assert not options.declared("required")

    def test_unknown_numericality_names_are_not_type_checked(self):
        contract = Contract.from_declarations([("a", {"numericality": {"gt": 0, "odd": True}})])
        assert contract.get("a").options.numericality == (("gt", 0), ("odd", True))

    def test_frozen(self):
        options = ParamOptions.model_validate({"type": "string"})
        with pytest.raises(ValidationError):
            options.type = "integer"


class TestParamSpecChecks:
    """ParamSpec.checks() yields declared checks in library order."""

    def test_order_follows_check_library(self):
        spec = parse_declarations([("a", {"length": {"min": 1}, "in": ["x"], "type": "string", "required": True})])[0]
        assert [kind for kind, _ in spec.checks()] == ["type", "in", "length"]

    def test_none_format_func_allow_nil_are_skipped(self):
        spec = parse_declarations([("a", {"format": None, "func": None, "allow_nil": None})])[0]
        assert list(spec.checks()) == []

    def test_required_resolution(self):
        declared, undeclared = parse_declarations([("a", {"required": False}), ("b", {})])
        assert declared.is_required(default_required=True) is False
        assert undeclared.is_required(default_required=True) is True
        assert undeclared.is_required(default_required=False) is False


class TestMalformedDeclarations:
    """Bad configs raise ContractDefinitionError at build time."""

    @pytest.mark.parametrize("options", [
        {"format": "(unclosed"},
        {"format": 5},
        {"required": "yes"},
        {"allow_nil": 1},
        {"numericality": {"gt": "ten"}},
        {"numericality": 5},
        {"length": {"min": "one"}},
        {"length": {"in": "1..5"}},
        {"in": "abc"},
        {"not_in": 5},
        {"func": "not callable"},
    ])
    def test_bad_option(self, options):
        with pytest.raises(ContractDefinitionError):
            Contract.from_declarations([("a", options)])

    def test_duplicate_name(self):
        with pytest.raises(ContractDefinitionError, match="more than once"):
            Contract.from_declarations([("a", {}), ("a", {})])

    @pytest.mark.parametrize("declarations", [42, [("a",)], [("a", "integer")]])
    def test_bad_declaration_shape(self, declarations):
        with pytest.raises(ContractDefinitionError):
            Contract.from_declarations(declarations)

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            Contract.from_declarations([("a", {"required": "yes"})])


class TestContract:
    """Contract container behavior."""

    def test_declaration_shapes_agree(self):
        from_list = Contract.from_declarations([("a", {"type": "integer"}), ("b", {})])
        from_map = Contract.from_declarations({"a": {"type": "integer"}, "b": {}})

        assert from_list == from_map
        assert from_list.names == ["a", "b"]
        assert len(from_list) == 2

    def test_none_is_empty(self):
        assert len(Contract.from_declarations(None)) == 0

    def test_contract_passes_through(self):
        contract = Contract.from_declarations({"a": {}})
        assert Contract.from_declarations(contract) is contract

    def test_get(self):
        contract = Contract.from_declarations({"a": {"default": 1}})
        assert contract.get("a").default == 1
        assert contract.get("missing") is None

    def test_frozen(self):
        contract = Contract.from_declarations({"a": {}})
        with pytest.raises(dataclasses.FrozenInstanceError):
            contract.params = ()


class TestContractBuilder:
    """ContractBuilder.param() / build()"""

    def test_builds_in_declaration_order(self):
        contract = (
            ContractBuilder()
            .param("name", type="string", length={"min": 1})
            .param("age", {"type": "integer"}, numericality={"gte": 18})
            .parameter("role", in_=["admin", "user"], default="user")
            .build()
        )

        assert contract.names == ["name", "age", "role"]
        assert contract.get("age").options.numericality == (("gte", 18),)
        assert contract.get("role").options.declared("in")

    def test_keyword_options_win(self):
        contract = ContractBuilder().param("a", {"type": "string"}, type="integer").build()
        assert contract.get("a").options.type is TypeKind.INTEGER

    def test_duplicate_name(self):
        builder = ContractBuilder().param("a")
        with pytest.raises(ContractDefinitionError) as exc:
            builder.param("a")
        assert exc.value.field == "a"

    def test_bad_options_name_the_field(self):
        with pytest.raises(ContractDefinitionError) as exc:
            ContractBuilder().param("pattern", format="(")
        assert exc.value.field == "pattern"
        assert "pattern" in str(exc.value)
