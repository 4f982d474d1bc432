from __future__ import annotations

from pathlib import Path

import click
import pytest

from peerbump.config import PeerbumpConfig
from peerbump.context import PeerbumpContext, pass_context


@click.command()
@pass_context
def echo_context(ctx: PeerbumpContext) -> PeerbumpContext:
    return ctx


@pytest.mark.unit
class TestPeerbumpContext:
    """Tests for PeerbumpContext."""

    def test_starts_with_defaults(self) -> None:
        ctx = PeerbumpContext()

        assert (ctx.config_path, ctx.verbose, ctx.color) == (None, 0, True)
        assert ctx.config == PeerbumpConfig()

    def test_contexts_do_not_share_settings(self) -> None:
        first, second = PeerbumpContext(), PeerbumpContext()

        first.config.registries.append("https://mirror.example/pypi")

        assert second.config.registries == ["https://pypi.org/pypi"]

    def test_holds_group_options(self) -> None:
        ctx = PeerbumpContext()
        settings = PeerbumpConfig(verify_incompatible_baseline=True)

        ctx.config_path = Path("peerbump.toml")
        ctx.verbose = 2
        ctx.color = False
        ctx.config = settings

        assert ctx.config is settings
        assert ctx.config_path == Path("peerbump.toml")

    def test_rejects_unknown_attributes(self) -> None:
        with pytest.raises(AttributeError):
            PeerbumpContext().registries = []  # type: ignore[attr-defined]


@pytest.mark.unit
class TestPassContext:
    """Tests for the pass_context decorator."""

    def test_reuses_context_set_by_group(self) -> None:
        click_ctx = click.Context(click.Command("peerbump"))
        click_ctx.obj = PeerbumpContext()

        assert click_ctx.invoke(echo_context) is click_ctx.obj

    def test_creates_default_context_when_missing(self) -> None:
        click_ctx = click.Context(click.Command("peerbump"))

        result = click_ctx.invoke(echo_context)

        assert isinstance(result, PeerbumpContext)
        assert result.config.verify_incompatible_baseline is False
