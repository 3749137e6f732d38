"""Contract descriptors derived from Protocol and ABC classes."""

import numbers

import pytest

from mockproxy import INDEXER_NAME, MemberKind, describe_contract, forwardable_members

from fakes import (
    ICube,
    IGrid,
    ILogger,
    IGenericMethods,
    IOrigin,
    IProfile,
    IService,
    ISink,
    IWriteOnlyScores,
    N,
    Repository,
)


def _members(contract):
    return {m.name: m for m in describe_contract(contract)}


class TestMethods:
    def test_service_members(self):
        members = _members(IService)

        assert list(members) == [
            "value",
            "method1",
            "method2",
            "method3",
            "generic_method",
            "method3_async",
            "ping_async",
        ]

    def test_void_and_async(self):
        members = _members(IService)

        assert members["method1"].is_void
        assert not members["method3"].is_void
        assert members["method3_async"].is_async
        assert not members["ping_async"].is_void

    def test_generic_method(self):
        member = _members(IService)["generic_method"]

        assert member.kind is MemberKind.GENERIC_METHOD
        assert member.generic_arity == 1

    def test_constraints(self):
        member = _members(IGenericMethods)["total"]

        assert member.constraints == {N: numbers.Number}

    def test_variadic_methods_are_flagged_but_forwardable(self):
        members = _members(ILogger)

        assert members["log"].variadic
        assert members["emit"].variadic and members["emit"].is_void
        assert not members["level"].variadic
        assert [m.name for m in forwardable_members(ILogger)] == ["log", "emit", "level"]

    def test_private_and_static_members_are_excluded(self):
        assert set(_members(Repository)) == {"get", "put"}

    def test_rejects_non_class(self):
        with pytest.raises(TypeError):
            describe_contract(42)

    def test_descriptors_are_cached(self):
        assert describe_contract(IService) is describe_contract(IService)


class TestProperties:
    def test_property_accessors(self):
        members = _members(IProfile)

        assert members["name"].readable and not members["name"].writable
        assert members["secret"].readable and members["secret"].writable

    def test_annotated_attributes(self):
        members = _members(IProfile)

        assert members["nickname"].kind is MemberKind.PROPERTY
        assert members["tags"].return_type == list[str]
        assert members["tags"].writable

    def test_write_only_property(self):
        member = _members(ISink)["target"]

        assert member.writable and not member.readable
        assert member.return_type is str


class TestIndexers:
    def test_two_index_parameters(self):
        member = _members(IGrid)[INDEXER_NAME]

        assert member.kind is MemberKind.INDEXER
        assert member.arity == 2
        assert member.readable and member.writable
        assert member.return_type is str

    def test_zero_index_parameters(self):
        assert _members(IOrigin)[INDEXER_NAME].arity == 0

    def test_write_only(self):
        member = _members(IWriteOnlyScores)[INDEXER_NAME]

        assert member.writable and not member.readable
        assert member.arity == 1
        assert member.params[0].annotation is str

    def test_three_index_parameters_are_unsupported(self):
        member = _members(ICube)[INDEXER_NAME]

        assert not member.supported
        assert forwardable_members(ICube) == ()
