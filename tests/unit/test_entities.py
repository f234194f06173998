"""entities.py のユニットテスト（名前の検証）."""

import pytest

from file_tag_db.core.entities import FileTag, validate_tag_name, validate_value_name
from file_tag_db.core.exceptions import InvalidNameError


class TestValidateNames:
    @pytest.mark.parametrize("name", ["music", "mp3", "drum-n-bass", "2009", "日本語", "a b"])
    def test_valid_names(self, name: str) -> None:
        validate_tag_name(name)
        validate_value_name(name)

    @pytest.mark.parametrize(
        ("name", "match"),
        [
            ("", "cannot be empty"),
            (".", "cannot be"),
            ("..", "cannot be"),
            ("a/b", "reserved character"),
            ("a\\b", "reserved character"),
            ("a=b", "reserved character"),
            ("(a)", "reserved character"),
            ("and", "reserved word"),
            ("NOT", "reserved word"),
            ("a\tb", "non-printable"),
        ],
    )
    def test_invalid_tag_names(self, name: str, match: str) -> None:
        with pytest.raises(InvalidNameError, match=match):
            validate_tag_name(name)

    def test_invalid_value_name_mentions_value(self) -> None:
        with pytest.raises(InvalidNameError, match="value name"):
            validate_value_name("")

    def test_invalid_name_is_value_error(self) -> None:
        """InvalidNameError は ValueError としても捕捉できること."""
        with pytest.raises(ValueError):
            validate_tag_name("")


class TestFileTag:
    def test_no_value_differs_from_value(self) -> None:
        """値なしと値付きのタグ付けは別物として比較されること."""
        assert FileTag(1, 2, None) != FileTag(1, 2, 3)
        assert FileTag(1, 2).to_tag_id_value_id_pair() == (2, None)
