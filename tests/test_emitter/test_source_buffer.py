"""Tests for contractgen.emitter.source_buffer -- idempotent module merging."""

from __future__ import annotations

import pytest

from contractgen.emitter.source_buffer import ADDED, REPLACED, UNCHANGED, SourceBuffer


MODULE = """\
# Generated by contractgen.
from abc import ABC, abstractmethod

from core import Either


class LoginRepository(ABC):
    pass


class LoginRepositoryImpl(LoginRepository):
    def __init__(self, remote_data_source) -> None:
        self.remote_data_source = remote_data_source
"""

MEMBER = """\
    async def login(
        self,
        body: LoginBody,
    ) -> LoginEntity:
        return await self.remote_data_source.login(body)"""


class TestImports:
    def test_merges_names_by_module(self) -> None:
        buffer = SourceBuffer(MODULE)
        assert buffer.add_import("from core import Left, Either") is True
        assert "from core import Either, Left" in buffer.text.splitlines()

    def test_existing_import_is_a_no_op(self) -> None:
        buffer = SourceBuffer(MODULE)
        assert buffer.add_import("from abc import ABC") is False
        assert buffer.add_import("from core import Either") is False
        assert buffer.text == MODULE

    def test_new_import_goes_after_the_last_import(self) -> None:
        buffer = SourceBuffer(MODULE)
        buffer.add_import("import json")
        lines = buffer.text.splitlines()
        assert lines.index("import json") == lines.index("from core import Either") + 1

    def test_import_into_empty_module(self) -> None:
        buffer = SourceBuffer()
        buffer.add_import("import os")
        assert buffer.text == "import os\n"

    def test_parenthesised_import_is_skipped_over(self) -> None:
        buffer = SourceBuffer("from core import (\n    Either,\n    Left,\n)\n\n\nx = 1\n")
        buffer.add_import("import json")
        lines = buffer.text.splitlines()
        assert lines.index("import json") == lines.index(")") + 1


class TestFunctions:
    def test_add_then_unchanged(self) -> None:
        buffer = SourceBuffer("import os\n")
        function = "def f() -> int:\n    return 1"
        assert buffer.upsert_function("f", function) == ADDED
        assert buffer.upsert_function("f", function) == UNCHANGED
        assert buffer.text.count("def f(") == 1

    def test_replace_by_name(self) -> None:
        buffer = SourceBuffer("def f() -> int:\n    return 1\n\n\ndef g() -> int:\n    return 2\n")
        assert buffer.upsert_function("f", "def f() -> int:\n    return 3") == REPLACED
        assert "return 1" not in buffer.text
        assert "return 2" in buffer.text

    def test_insert_before_class(self) -> None:
        buffer = SourceBuffer("import os\n\n\nclass E:\n    pass\n")
        buffer.upsert_function("helper", "def helper() -> None:\n    pass", before="class E")
        lines = buffer.text.splitlines()
        assert lines.index("def helper() -> None:") < lines.index("class E:")


class TestMembers:
    def test_replaces_pass_body(self) -> None:
        buffer = SourceBuffer(MODULE)
        abstract = "    @abstractmethod\n    async def login(self, body: LoginBody) -> LoginEntity: ..."
        assert buffer.upsert_member("LoginRepository", "login", abstract) == ADDED
        text = buffer.text
        assert "    pass" not in text.split("class LoginRepositoryImpl")[0]

    def test_appends_after_existing_members(self) -> None:
        buffer = SourceBuffer(MODULE)
        assert buffer.upsert_member("LoginRepositoryImpl", "login", MEMBER) == ADDED
        text = buffer.text
        assert text.index("def __init__") < text.index("async def login")

    def test_rerun_is_unchanged(self) -> None:
        buffer = SourceBuffer(MODULE)
        buffer.upsert_member("LoginRepositoryImpl", "login", MEMBER)
        once = buffer.text
        assert buffer.upsert_member("LoginRepositoryImpl", "login", MEMBER) == UNCHANGED
        assert buffer.text == once

    def test_changed_member_is_replaced(self) -> None:
        buffer = SourceBuffer(MODULE)
        buffer.upsert_member("LoginRepositoryImpl", "login", MEMBER)
        buffer.upsert_member("LoginRepositoryImpl", "logout", MEMBER.replace("login", "logout"))
        changed = MEMBER.replace("body: LoginBody", "body: list[LoginBody]")
        assert buffer.upsert_member("LoginRepositoryImpl", "login", changed) == REPLACED
        text = buffer.text
        assert text.count("async def login(") == 1
        assert "body: list[LoginBody]" in text
        assert "async def logout(" in text

    def test_class_name_prefix_does_not_match(self) -> None:
        """``LoginRepository`` must not match ``LoginRepositoryImpl``."""
        buffer = SourceBuffer(MODULE)
        buffer.upsert_member("LoginRepository", "login", MEMBER)
        impl = buffer.text.split("class LoginRepositoryImpl")[1]
        assert "async def login" not in impl

    def test_unknown_class(self) -> None:
        with pytest.raises(KeyError):
            SourceBuffer(MODULE).upsert_member("Missing", "login", MEMBER)

    def test_has_class(self) -> None:
        buffer = SourceBuffer(MODULE)
        assert buffer.has_class("LoginRepositoryImpl")
        assert not buffer.has_class("Login")


def test_text_ends_with_single_newline() -> None:
    assert SourceBuffer("x = 1\n\n\n").text == "x = 1\n"
    assert SourceBuffer("").text == ""
