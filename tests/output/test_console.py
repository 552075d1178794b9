"""Tests for Rich Console factory and theme."""

from io import StringIO

from mdctl.output.console import MD_THEME, create_console, get_output, style_for_action


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        console = create_console()
        assert isinstance(console.file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[bold red]hello[/bold red]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "hello" in output

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80

    def test_default_width(self) -> None:
        assert create_console().width == 120

    def test_theme_styles_resolve(self) -> None:
        console = create_console()
        console.print("[md.ok]fine[/md.ok] [md.error]bad[/md.error]")
        assert get_output(console).strip() == "fine bad"


class TestTheme:
    def test_theme_keys(self) -> None:
        for name in ("md.ok", "md.error", "md.warning", "md.op", "md.path"):
            assert name in MD_THEME.styles


class TestStyleForAction:
    def test_known_actions(self) -> None:
        assert style_for_action("migrated") == "md.ok"
        assert style_for_action("failed") == "md.error"
        assert style_for_action("skipped") == "md.skip"

    def test_unknown_action(self) -> None:
        assert style_for_action("teleported") == ""
