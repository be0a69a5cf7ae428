"""Tests for random id generation."""

import pytest

from shortlink.services.id_generator import generate_identifier


class TestGenerateIdentifier:
    def test_shape(self):
        identifier = generate_identifier("abc", 8)
        assert len(identifier) == 8
        assert set(identifier) <= set("abc")

    def test_ids_differ(self):
        ids = {generate_identifier("0123456789abcdef", 16) for _ in range(50)}
        assert len(ids) == 50

    @pytest.mark.parametrize("alphabet,length", [("", 6), ("abc", 0), ("abc", -1)])
    def test_invalid_arguments(self, alphabet, length):
        with pytest.raises(ValueError):
            generate_identifier(alphabet, length)
