"""Fuzzy matching of typed text against slash commands."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from mcphost.commands import SLASH_COMMANDS, SlashCommand


@dataclass(frozen=True)
class FuzzyMatch:
    """A command that matched a query, with its score."""

    command: SlashCommand
    score: int


def _normalize(name: str) -> str:
    return name.removeprefix("/").lower()


def fuzzy_match_commands(
    query: str, commands: Sequence[SlashCommand] | None = None
) -> list[FuzzyMatch]:
    """Return the commands matching ``query``, best score first.

    An empty query or a lone "/" matches every command with score 0.
    """
    if commands is None:
        commands = SLASH_COMMANDS
    if query in ("", "/"):
        return [FuzzyMatch(command=cmd, score=0) for cmd in commands]

    normalized = _normalize(query)
    matches = [
        FuzzyMatch(command=cmd, score=score)
        for cmd in commands
        if (score := fuzzy_score(normalized, cmd)) > 0
    ]
    return sorted(matches, key=lambda match: match.score, reverse=True)


def fuzzy_score(query: str, command: SlashCommand) -> int:
    """Score how well a normalized query (lower case, no "/") fits a command."""
    name = _normalize(command.name)
    aliases = [_normalize(alias) for alias in command.aliases]

    if name == query:
        return 1000
    if query in aliases:
        return 900
    if name.startswith(query):
        return 800 - len(name) + len(query)
    for alias in aliases:
        if alias.startswith(query):
            return 700 - len(alias) + len(query)
    if query in name:
        return 500
    if query in command.description.lower():
        return 300

    score = fuzzy_character_match(query, name)
    if score > 0:
        return score
    for alias in aliases:
        score = fuzzy_character_match(query, alias)
        if score > 0:
            return score - 50
    return 0


def fuzzy_character_match(query: str, target: str) -> int:
    """Score an in-order character match of ``query`` within ``target``.

    Returns 0 unless every character of the query is found in order.
    """
    if len(query) > len(target):
        return 0

    matched = 0
    score = 100
    streak = 0
    for ch in target:
        if matched == len(query):
            break
        if ch == query[matched]:
            matched += 1
            streak += 1
            score += streak * 10
        else:
            streak = 0
            score -= 5

    return score if matched == len(query) else 0