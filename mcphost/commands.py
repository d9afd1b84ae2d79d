"""Registry of the slash commands understood by the interactive prompt."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SlashCommand:
    """A slash command with its description, aliases and category."""

    name: str
    description: str
    aliases: tuple[str, ...] = field(default_factory=tuple)
    category: str = ""

    def names(self) -> tuple[str, ...]:
        """The command name followed by its aliases."""
        return (self.name, *self.aliases)


SLASH_COMMANDS: tuple[SlashCommand, ...] = (
    SlashCommand(
        name="/help",
        description="Show available commands and usage information",
        category="Info",
        aliases=("/h", "/?"),
    ),
    SlashCommand(
        name="/tools",
        description="List all available MCP tools",
        category="Info",
        aliases=("/t",),
    ),
    SlashCommand(
        name="/servers",
        description="Show connected MCP servers",
        category="Info",
        aliases=("/s",),
    ),
    SlashCommand(
        name="/clear",
        description="Clear conversation and start fresh",
        category="System",
        aliases=("/c", "/cls"),
    ),
    SlashCommand(
        name="/usage",
        description="Show token usage statistics",
        category="Info",
        aliases=("/u",),
    ),
    SlashCommand(
        name="/reset-usage",
        description="Reset usage statistics",
        category="System",
        aliases=("/ru",),
    ),
    SlashCommand(
        name="/quit",
        description="Exit the application",
        category="System",
        aliases=("/q", "/exit"),
    ),
)


def get_command_by_name(name: str) -> SlashCommand | None:
    """Return the command whose name or alias equals ``name``, or None."""
    return next((cmd for cmd in SLASH_COMMANDS if name in cmd.names()), None)


def get_all_command_names() -> list[str]:
    """Return every command name and alias, in registry order."""
    return [name for cmd in SLASH_COMMANDS for name in cmd.names()]