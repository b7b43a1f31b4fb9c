"""Numbered interactive pick lists shared by ``account select`` and ``app select``."""

from __future__ import annotations

from typing import Any

from rownd_cli.context import CommandContext


def print_listing(
    ctx: CommandContext, title: str, items: list[dict[str, Any]], selected: str | None
) -> None:
    ctx.out(f"\n{title}:")
    ctx.out("-" * 18)
    for item in items:
        marker = "* " if item.get("id") == selected else "  "
        ctx.out(f"{marker}{item.get('name')} ({item.get('id')})")


def choose(
    ctx: CommandContext,
    title: str,
    items: list[dict[str, Any]],
    selected: str | None,
    *,
    noun: str,
    index: int | None = None,
) -> dict[str, Any] | None:
    """Return the chosen item, or None for an invalid choice.

    ``index`` is 1-based, as shown in the listing; when given the prompt
    is skipped.
    """
    ctx.out(f"\n{title}:")
    ctx.out("-" * 18)
    for n, item in enumerate(items, start=1):
        marker = "* " if item.get("id") == selected else "  "
        ctx.out(f"{n}. {marker}{item.get('name')} ({item.get('id')})")

    if index is None:
        answer = ctx.prompt(f"\nSelect an {noun} number: ")
        try:
            index = int(answer.strip())
        except ValueError:
            index = 0
    if 1 <= index <= len(items):
        return items[index - 1]
    ctx.out("Invalid selection")
    return None
