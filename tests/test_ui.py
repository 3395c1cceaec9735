"""Tests for npk_deploy.ui confirmation helpers."""

from __future__ import annotations

import pytest

from npk_deploy import ui


class TestConfirmPhrase:
    def test_exact_yes_accepted(self):
        assert ui.confirm_phrase("warning", reader=lambda prompt: "Yes")

    def test_surrounding_whitespace_ignored(self):
        assert ui.confirm_phrase("warning", reader=lambda prompt: "  Yes\n")

    @pytest.mark.parametrize("answer", ["yes", "Y", "", "YES", "Yes please"])
    def test_anything_else_refused(self, answer):
        assert not ui.confirm_phrase("warning", reader=lambda prompt: answer)

    def test_end_of_input_refused(self):
        def reader(prompt):
            raise EOFError

        assert not ui.confirm_phrase("warning", reader=reader)


class TestRefuse:
    def test_always_false(self):
        assert ui.refuse("warning") is False


class TestHelpBanner:
    def test_mentions_support_url(self, capsys):
        ui.help_banner()
        assert ui.SUPPORT_URL in capsys.readouterr().out
