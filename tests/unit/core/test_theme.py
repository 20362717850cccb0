"""Unit tests for theme module.

Tests for color validation and Rich theme generation.
"""

import pytest
import shadowvault.core.theme as theme_module
from rich.theme import Theme
from shadowvault.core.theme import ThemeColors, get_rich_theme, get_theme


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.header == "#69B9A1"
        assert colors.success == "#03b971"
        assert colors.crushed == "#d44ebc"

    def test_valid_hex_colors(self) -> None:
        """ThemeColors accepts valid hex color codes."""
        colors = ThemeColors(text="#AABBCC", muted="#abc", backup="#123456")
        assert colors.text == "#AABBCC"
        assert colors.muted == "#abc"
        assert colors.backup == "#123456"

    def test_invalid_hex_no_hash(self) -> None:
        """ThemeColors rejects colors without # prefix."""
        with pytest.raises(ValueError, match="must start with '#'"):
            ThemeColors(text="ffffff")

    def test_invalid_hex_wrong_length(self) -> None:
        """ThemeColors rejects colors of the wrong length."""
        with pytest.raises(ValueError, match="#RGB or #RRGGBB"):
            ThemeColors(text="#abcd")

    def test_invalid_hex_chars(self) -> None:
        """ThemeColors rejects non-hex characters."""
        with pytest.raises(ValueError, match="invalid hex color"):
            ThemeColors(text="#gggggg")

    def test_extra_fields_forbidden(self) -> None:
        """ThemeColors rejects unknown color names."""
        with pytest.raises(ValueError):
            ThemeColors(sparkle="#ffffff")  # type: ignore[call-arg]


class TestGetRichTheme:
    """Tests for get_rich_theme function."""

    def test_returns_rich_theme(self) -> None:
        """get_rich_theme returns a Rich Theme."""
        assert isinstance(get_rich_theme(ThemeColors()), Theme)

    def test_defaults_without_colors(self) -> None:
        """Without colors the default scheme is used."""
        default = get_rich_theme()

        assert default.styles["crushed"] == get_rich_theme(ThemeColors()).styles["crushed"]

    def test_includes_lifecycle_styles(self) -> None:
        """Styles for live, backup and crushed paths are defined."""
        theme = get_rich_theme(ThemeColors())

        for name in ("live", "backup", "crushed", "bold_header", "dim"):
            assert name in theme.styles

    def test_uses_provided_colors(self) -> None:
        """Provided colors end up in the styles."""
        theme = get_rich_theme(ThemeColors(backup="#123456"))

        assert theme.styles["backup"].color is not None
        assert theme.styles["backup"].color.triplet is not None
        assert theme.styles["backup"].color.triplet.hex == "#123456"


class TestGetTheme:
    """Tests for get_theme function."""

    def test_caches_theme(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The theme is built once and reused."""
        monkeypatch.setattr(theme_module, "_cached_theme", None)

        first = get_theme()
        second = get_theme()

        assert first is second

