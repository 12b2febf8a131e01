"""Tests for pipecheck.kernel.fuzzy."""

import pytest

from pipecheck.kernel.fuzzy import (
    camel_to_snake,
    distance_threshold,
    edit_distance,
    nearest_names,
)


class TestCamelToSnake:
    """Test camelCase to snake_case conversion."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("parseJson", "parse_json"),
            ("mapEachKey", "map_each_key"),
            ("toUpperCase", "to_upper_case"),
            ("HTTPServer", "http_server"),
            ("already_snake", "already_snake"),
            ("ts2Unix", "ts2_unix"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert camel_to_snake(name) == expected


class TestEditDistance:
    """Test the bounded Levenshtein distance."""

    def test_identical(self) -> None:
        assert edit_distance("kafka", "kafka") == 0

    def test_single_edits(self) -> None:
        assert edit_distance("kafka", "kafaka") == 1
        assert edit_distance("kafka", "kafk") == 1
        assert edit_distance("kafka", "kafkb") == 1

    def test_symmetric(self) -> None:
        assert edit_distance("topics", "topcs") == edit_distance("topcs", "topics")

    def test_length_gap_short_circuits(self) -> None:
        assert edit_distance("a", "abcdefgh", max_distance=2) == 3

    def test_bounded_result(self) -> None:
        assert edit_distance("abcdef", "uvwxyz", max_distance=2) == 3

    def test_threshold_has_floor_of_two(self) -> None:
        assert distance_threshold("url") == 2
        assert distance_threshold("consumer_group") == 4


class TestNearestNames:
    """Test suggestion strategies and their priority."""

    def setup_method(self) -> None:
        self.pool = ["kafka", "kafka_franz", "nats", "stdout", "aws_s3"]

    def test_alias_hit_wins(self) -> None:
        assert nearest_names("s3", self.pool, aliases={"s3": "aws_s3"}) == ["aws_s3"]

    def test_alias_lookup_is_case_insensitive(self) -> None:
        assert nearest_names("S3", self.pool, aliases={"s3": "aws_s3"}) == ["aws_s3"]

    def test_alias_targets_outside_pool_are_dropped(self) -> None:
        result = nearest_names("kinesis", self.pool, aliases={"kinesis": "aws_kinesis"})
        assert result == []

    def test_substring_containment(self) -> None:
        assert nearest_names("kafka_consumer", self.pool) == ["kafka"]

    def test_short_names_are_not_contained(self) -> None:
        assert nearest_names("s", ["stdout"]) == []

    def test_shared_prefix(self) -> None:
        assert nearest_names("stdot", self.pool) == ["stdout"]

    def test_edit_distance_only_when_enabled(self) -> None:
        pool = ["topics", "addresses"]
        assert nearest_names("tpoics", pool) == []
        assert nearest_names("tpoics", pool, use_edit_distance=True) == ["topics"]

    def test_limit(self) -> None:
        pool = ["kafka_a", "kafka_b", "kafka_c", "kafka_d"]
        assert nearest_names("kafka", pool) == ["kafka_a", "kafka_b", "kafka_c"]
        assert nearest_names("kafka", pool, limit=1) == ["kafka_a"]

    def test_empty_inputs(self) -> None:
        assert nearest_names("", self.pool) == []
        assert nearest_names("kafka", []) == []

    def test_deterministic_order(self) -> None:
        first = nearest_names("kaf", self.pool)
        assert first == nearest_names("kaf", self.pool)
        assert first == ["kafka", "kafka_franz"]
