# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for generator rules and configuration file loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from asicsmith.errors import ParseError
from asicsmith.library import GeneratorLibrary, GeneratorRule, ParameterSpec


class TestParameterSpec:

    @pytest.mark.parametrize("value,expected", [
        (32, True),
        ("32", True),
        ("0x20", True),
        (0, False),
        (65, False),
        (-1, False),
        (3.5, False),
        (True, False),
        ("wide", False),
    ])
    def test_unsigned_range(self, value, expected):
        spec = ParameterSpec(name="width", type="unsigned", range=(1, 64))
        assert spec.accepts(value) is expected

    def test_eq_and_ne(self):
        assert ParameterSpec(name="w", type="unsigned", eq=8).accepts("8")
        assert not ParameterSpec(name="w", type="unsigned", eq=8).accepts(16)
        assert not ParameterSpec(name="w", ne=8).accepts(8)

    def test_one_of(self):
        spec = ParameterSpec(name="kind", type="string", one_of=("add", "sub"))
        assert spec.accepts("sub")
        assert not spec.accepts("mul")

    def test_lower_and_upper_bound(self):
        spec = ParameterSpec(name="latency", lb=1, ub=4)
        assert spec.accepts(1)
        assert spec.accepts(4.0)
        assert not spec.accepts(5)
        assert not spec.accepts("fast")

    def test_boolean(self):
        spec = ParameterSpec(name="signed", type="boolean", eq=True)
        assert spec.accepts("yes")
        assert spec.accepts(True)
        assert not spec.accepts("off")
        assert not spec.accepts("maybe")

    def test_pattern(self):
        spec = ParameterSpec(name="op", pattern=r"f(add|mul)")
        assert spec.accepts("fadd")
        assert not spec.accepts("fadd32")

    def test_invalid_pattern_is_rejected(self):
        with pytest.raises(ValidationError):
            ParameterSpec(name="op", pattern="(")

    def test_unknown_constraint_is_rejected(self):
        with pytest.raises(ValidationError):
            ParameterSpec(name="width", between=(1, 2))


class TestGeneratorRule:

    def test_exactly_one_procedure(self):
        with pytest.raises(ValidationError, match="exactly one"):
            GeneratorRule(name="adder")
        with pytest.raises(ValidationError, match="exactly one"):
            GeneratorRule(name="adder", template="x", generator="gen")

    def test_extension_follows_hdl(self):
        assert GeneratorRule(name="a", template="x").extension == "v"
        assert GeneratorRule(name="a", template="x", hdl="systemverilog").extension == "sv"
        assert GeneratorRule(name="a", template="x", hdl="vhdl").extension == "vhd"

    def test_predicate_requires_constrained_parameters(self):
        rule = GeneratorRule(
            name="adder", template="x",
            parameters=(ParameterSpec(name="width", type="unsigned"),),
        )
        assert rule.accepts("adder", {"width": 32, "extra": "ignored"})
        assert not rule.accepts("adder", {})
        assert not rule.accepts("subtractor", {"width": 32})

    def test_rules_are_immutable(self):
        rule = GeneratorRule(name="adder", template="x")
        with pytest.raises(ValidationError):
            rule.name = "other"


class TestGeneratorLibrary:

    def test_loads_rules_in_file_order(self, write_yaml):
        first = write_yaml("a.yaml", [
            {"name": "adder", "template": "a"},
            {"name": "fifo", "template": "f"},
        ])
        second = write_yaml("b.yaml", {"components": [{"name": "adder", "template": "b"}]})

        library = GeneratorLibrary.from_files([first, second])

        assert len(library) == 3
        assert [(r.name, r.template, r.index) for r in library] == [
            ("adder", "a", 0), ("fifo", "f", 1), ("adder", "b", 0),
        ]
        assert [r.source for r in library] == [first, first, second]
        assert library.sources == (first, second)

    def test_dashed_keys(self, write_yaml):
        path = write_yaml("rules.yaml", [{
            "name": "adder",
            "module-name": "adder_{{ width }}",
            "template": "x",
            "parameters": [{"name": "width", "one-of": [8, 16]}],
        }])

        rule = GeneratorLibrary.from_files([path]).rules[0]

        assert rule.module_name == "adder_{{ width }}"
        assert rule.parameters[0].one_of == (8, 16)

    def test_dynamatic_path_is_substituted(self, write_yaml, tmp_path):
        path = write_yaml("rules.yaml", [
            {"name": "fifo", "generic": "$DYNAMATIC/data/fifo.v"},
            {"name": "lsq", "generator": "python3 ${DYNAMATIC}/tools/lsq.py"},
        ])

        library = GeneratorLibrary.from_files([path], dynamatic_path="/opt/dynamatic")

        assert library.rules[0].generic == Path("/opt/dynamatic/data/fifo.v")
        assert library.rules[1].generator == "python3 /opt/dynamatic/tools/lsq.py"

    def test_relative_generic_is_resolved_against_config(self, write_yaml, tmp_path):
        path = write_yaml("conf/rules.yaml", [{"name": "fifo", "generic": "fifo.v.j2"}])
        rule = GeneratorLibrary.from_files([path]).rules[0]
        assert rule.generic == tmp_path / "conf" / "fifo.v.j2"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseError, match="Could not open RTL configuration file"):
            GeneratorLibrary.from_files([tmp_path / "missing.yaml"])

    def test_not_a_list(self, write_yaml):
        with pytest.raises(ParseError, match="must contain a list"):
            GeneratorLibrary.from_files([write_yaml("rules.yaml", {"name": "adder"})])

    def test_invalid_record_leaves_library_unchanged(self, write_yaml):
        good = write_yaml("good.yaml", [{"name": "adder", "template": "x"}])
        bad = write_yaml("bad.yaml", [
            {"name": "fifo", "template": "x"},
            {"name": "lsq"},
        ])
        library = GeneratorLibrary.from_files([good])

        with pytest.raises(ParseError, match=r"Invalid component #1 \('lsq'\)") as exc_info:
            library.load(bad)

        assert exc_info.value.details
        assert [r.name for r in library] == ["adder"]

    def test_reserved_keys(self, write_yaml):
        path = write_yaml("rules.yaml", [{"name": "adder", "template": "x", "index": 3}])
        with pytest.raises(ParseError, match="reserved key"):
            GeneratorLibrary.from_files([path])

    def test_non_mapping_record(self, write_yaml):
        with pytest.raises(ParseError, match="is not a mapping"):
            GeneratorLibrary.from_files([write_yaml("rules.yaml", ["adder"])])

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_bytes(b"\xff\xfe- name: adder\n")
        library = GeneratorLibrary()

        with pytest.raises(ParseError, match="not valid UTF-8"):
            library.load(path)
        assert len(library) == 0
