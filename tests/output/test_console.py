"""Tests for Rich Console factory and theme."""

from io import StringIO

from optguard.output.console import OPTGUARD_THEME, create_console, get_output


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        assert isinstance(create_console().file, StringIO)

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
        console.print("[opt.changed]title_location[/opt.changed]")
        assert "title_location" in get_output(console)


class TestTheme:
    def test_expected_styles(self) -> None:
        for name in ("opt.ok", "opt.error", "opt.warning", "opt.op", "opt.rule"):
            assert name in OPTGUARD_THEME.styles
