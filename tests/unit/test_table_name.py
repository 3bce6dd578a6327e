from __future__ import annotations

import pytest

from simple_record.record import Record
from simple_record.utils.inflector import short_name, tableize
from tests.stubs import BlogPost, Comment, Post


def test_table_name_by_class_name() -> None:
    assert Record.table_name(Post) == "post"


def test_table_name_by_override() -> None:
    assert Record.table_name(Comment) == "table_comment"
    assert Comment.table_name() == "table_comment"


def test_table_name_by_instance() -> None:
    assert Post().table_name() == "post"
    assert BlogPost().table_name() == "blog_post"


def test_table_name_by_type_name_string() -> None:
    assert Record.table_name("Post") == "post"
    assert Record.table_name("app.models.BlogPost") == "blog_post"


def test_table_name_override_is_inherited() -> None:
    class PinnedComment(Comment):
        pass

    assert PinnedComment.table_name() == "table_comment"


@pytest.mark.parametrize(
    ("word", "expected"),
    [
        ("Post", "post"),
        ("BlogPost", "blog_post"),
        ("HTTPLog", "h_t_t_p_log"),
        ("post", "post"),
        ("UserV2", "user_v2"),
    ],
)
def test_tableize(word: str, expected: str) -> None:
    assert tableize(word) == expected


def test_short_name_strips_qualification() -> None:
    assert short_name("a.b.Comment") == "Comment"
    assert short_name("Comment") == "Comment"
