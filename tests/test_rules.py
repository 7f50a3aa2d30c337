"""
Tests for the five renaming rules and their parameter validation.
"""

from datetime import datetime

import pytest

from bulk_renamer.core import (
    CaseMode, ChangeCaseParams, DateTimeParams, InsertMode, InsertOverwriteParams,
    InvalidFormat, InvalidPattern, MissingMetadata, RemoveCharactersParams,
    ReplaceParams, RuleContext, RuleKind, TimeSource, apply_rule, validate_params,
)
from bulk_renamer.core.rules import change_case, split_words

NOW = datetime(2024, 3, 5, 14, 30, 15)


class TestSearchReplace:

    def test_identity_replacement(self):
        assert apply_rule("banana", ReplaceParams("a", "a")) == "banana"

    def test_literal_is_not_a_pattern(self):
        assert apply_rule("a.b.c", ReplaceParams(".", "_")) == "a_b_c"
        assert apply_rule("cat", ReplaceParams("a", r"\1")) == r"c\1t"

    def test_all_occurrences_replaced(self):
        assert apply_rule("aaa", ReplaceParams("aa", "b")) == "ba"

    def test_empty_replacement_deletes(self):
        assert apply_rule("IMG_0001", ReplaceParams("IMG_")) == "0001"

    def test_case_insensitive(self):
        params = ReplaceParams("IMG", "pic", case_sensitive=False)
        assert apply_rule("img_IMG", params) == "pic_pic"
        assert apply_rule("img_IMG", ReplaceParams("IMG", "pic")) == "img_pic"

    def test_regex_groups(self):
        params = ReplaceParams(r"(\d+)-(\d+)", r"\2-\1", use_regex=True)
        assert apply_rule("scan 12-34", params) == "scan 34-12"

    @pytest.mark.parametrize("params", [
        ReplaceParams(""),
        ReplaceParams("(", use_regex=True),
        ReplaceParams("a", r"\2", use_regex=True),
    ])
    def test_invalid_parameters(self, params):
        with pytest.raises(InvalidPattern):
            validate_params(params)


class TestInsertOverwrite:

    def test_insert_front_and_back(self):
        assert apply_rule("photo", InsertOverwriteParams("new_")) == "new_photo"
        assert apply_rule("photo", InsertOverwriteParams("_x", offset=5)) == "photo_x"
        assert apply_rule("photo", InsertOverwriteParams("-", offset=-1)) == "phot-o"

    def test_overwrite(self):
        params = InsertOverwriteParams("XX", offset=1, mode=InsertMode.OVERWRITE)
        assert apply_rule("photo", params) == "pXXto"

    def test_overwrite_past_end_appends(self):
        params = InsertOverwriteParams("XX", offset=99, mode=InsertMode.OVERWRITE)
        assert apply_rule("photo", params) == "photoXX"


class TestDateTime:

    def test_current_time(self):
        params = DateTimeParams(format="%Y%m%d_")
        assert apply_rule("photo", params, RuleContext(now=NOW)) == "20240305_photo"

    def test_overwrite_at_back(self):
        params = DateTimeParams(format="%H%M", offset=-4, mode=InsertMode.OVERWRITE)
        assert apply_rule("shot_0000", params, RuleContext(now=NOW)) == "shot_1430"

    def test_capture_time(self, make_entry):
        entry = make_entry("a.jpg", captured_at=datetime(2019, 7, 1, 8, 0))
        params = DateTimeParams(format="%Y-%m-%d ", source=TimeSource.FILE_METADATA)
        assert apply_rule("a", params, RuleContext(now=NOW, entry=entry)) == "2019-07-01 a"

    def test_modified_time(self, make_entry):
        mtime = datetime(2021, 1, 2, 3, 4, 5)
        entry = make_entry("a.jpg", mtime=mtime.timestamp())
        params = DateTimeParams(format="%Y%m%d%H%M%S", source=TimeSource.MODIFIED, offset=1000)
        assert apply_rule("a", params, RuleContext(now=NOW, entry=entry)) == "a20210102030405"

    def test_missing_capture_time(self, make_entry):
        params = DateTimeParams(source=TimeSource.FILE_METADATA)
        context = RuleContext(now=NOW, entry=make_entry("a.jpg"))
        with pytest.raises(MissingMetadata):
            apply_rule("a", params, context)

    def test_empty_format(self):
        with pytest.raises(InvalidFormat):
            validate_params(DateTimeParams(format=""))


def test_remove_characters():
    assert apply_rule("IMG_0001", RemoveCharactersParams(start=0, end=4)) == "0001"
    assert apply_rule("IMG_0001", RemoveCharactersParams(start=4, end=2)) == "IMG_0001"


class TestChangeCase:

    @pytest.mark.parametrize("mode, text, expected", [
        (CaseMode.UPPER, "My File", "MY FILE"),
        (CaseMode.LOWER, "My File", "my file"),
        (CaseMode.TITLE, "my_file-name", "My_File-Name"),
        (CaseMode.TITLE, "hELLO wORLD", "Hello World"),
        (CaseMode.SENTENCE, "hELLO wORLD", "Hello world"),
        (CaseMode.SENTENCE, "__abc DEF", "__Abc def"),
        (CaseMode.SNAKE, "MyFileName v2", "my_file_name_v2"),
        (CaseMode.KEBAB, "my_file name", "my-file-name"),
        (CaseMode.CAMEL, "my_file-name", "MyFileName"),
        (CaseMode.SHOUTY_SNAKE, "myFile name", "MY_FILE_NAME"),
        (CaseMode.MIXED, "my_file-name", "myFileName"),
        (CaseMode.MIXED, "My File", "myFile"),
    ])
    def test_modes(self, mode, text, expected):
        assert change_case(text, mode) == expected
        assert apply_rule(text, ChangeCaseParams(mode)) == expected

    def test_split_words(self):
        assert split_words("parseHTTPResponse_v2") == ["parse", "HTTPResponse", "v2"]

    def test_no_letters(self):
        assert change_case("___", CaseMode.SENTENCE) == "___"
        assert change_case("___", CaseMode.SNAKE) == ""


def test_rule_kinds_have_labels():
    assert RuleKind.REPLACE.label == "Search & Replace"
    assert {k.value for k in RuleKind} == {"replace", "insert", "datetime", "remove", "case"}
    assert ReplaceParams("a").kind == RuleKind.REPLACE
