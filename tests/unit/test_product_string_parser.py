"""
Unit tests for the order product string parser.
"""

from parsers.product_string_parser import parse_product_string, split_quantity


def _mapped(tokens):
    return [t for t in tokens if not t.is_unmapped]


def _unmapped(tokens):
    return [t for t in tokens if t.is_unmapped]


class TestMappedEntries:
    """Tests for entries outside parentheses."""

    def test_three_mapped_entries(self):
        """'2 X ALPHA, BETA, 1X GAMMA' yields three mapped tokens."""
        tokens = parse_product_string("2 X ALPHA, BETA, 1X GAMMA")

        assert len(tokens) == 3
        assert all(not t.is_unmapped for t in tokens)
        assert [(t.name, t.quantity) for t in tokens] == [
            ("ALPHA", 2),
            ("BETA", None),
            ("GAMMA", 1),
        ]
        assert tokens[1].effective_quantity == 1

    def test_empty_pieces_dropped(self):
        """Repeated commas never produce empty tokens."""
        tokens = parse_product_string("ALPHA,, ,BETA,")

        assert [t.name for t in tokens] == ["ALPHA", "BETA"]

    def test_lowercase_x(self):
        """Quantity separator is case-insensitive."""
        tokens = parse_product_string("3x creatina")

        assert tokens[0].quantity == 3
        assert tokens[0].name == "creatina"


class TestUnmappedEntries:
    """Tests for parenthesized entries."""

    def test_isolates_unmapped(self):
        """One unmapped and one mapped token from a mixed string."""
        tokens = parse_product_string("1X GEL PYTHON, (1 X EVIL GOODS! | SEBO DE RES)")

        unmapped = _unmapped(tokens)
        mapped = _mapped(tokens)

        assert len(unmapped) == 1
        assert unmapped[0].name == "(1 X EVIL GOODS! | SEBO DE RES)"
        assert unmapped[0].quantity == 1

        assert len(mapped) == 1
        assert mapped[0].name == "GEL PYTHON"
        assert mapped[0].quantity == 1

    def test_unmapped_without_quantity(self):
        """Interior without a prefix leaves quantity unset."""
        tokens = parse_product_string("(COMBO ESTRELLA)")

        assert len(tokens) == 1
        assert tokens[0].is_unmapped
        assert tokens[0].quantity is None
        assert tokens[0].name == "(COMBO ESTRELLA)"

    def test_removing_unmapped_collapses_commas(self):
        """Mapped entries around a removed group stay separate."""
        tokens = parse_product_string("ALPHA, (1 X FOO), BETA")

        assert [t.name for t in _mapped(tokens)] == ["ALPHA", "BETA"]
        assert [t.name for t in _unmapped(tokens)] == ["(1 X FOO)"]

    def test_multiple_unmapped(self):
        """Each parenthesized run is its own token."""
        tokens = parse_product_string("(1 X FOO), (2 X BAR)")

        assert [(t.name, t.quantity) for t in _unmapped(tokens)] == [
            ("(1 X FOO)", 1),
            ("(2 X BAR)", 2),
        ]
        assert _mapped(tokens) == []


class TestMalformedInput:
    """Tests for inputs that do not fit the format."""

    def test_empty_and_none(self):
        assert parse_product_string("") == []
        assert parse_product_string(None) == []

    def test_unterminated_parenthesis_is_literal(self):
        """A lone '(' is read as part of a mapped name."""
        tokens = parse_product_string("ALPHA, (1 X FOO")

        assert _unmapped(tokens) == []
        assert [t.name for t in tokens] == ["ALPHA", "(1 X FOO"]
        assert tokens[1].quantity is None

    def test_blank_parentheses_ignored(self):
        """'( )' does not produce a token."""
        assert parse_product_string("ALPHA, ( )") == [parse_product_string("ALPHA")[0]]


class TestSplitQuantity:
    """Tests for split_quantity."""

    def test_with_prefix(self):
        assert split_quantity("12 X GEL") == (12, "GEL")

    def test_without_prefix(self):
        assert split_quantity("GEL") == (None, "GEL")
