# mcphost

The terminal front end for a chat assistant that calls tools served over the
Model Context Protocol. It renders the conversation in the terminal, reads
prompts with slash-command completion, tracks token usage and cost, and
shows progress while models download.

## What is inside

- `mcphost.commands`: the slash-command registry (`/help`, `/tools`,
  `/servers`, `/clear`, `/usage`, `/reset-usage`, `/quit`) and their aliases,
  looked up with `get_command_by_name` and listed with
  `get_all_command_names`.
- `mcphost.fuzzy`: fuzzy ranking of slash commands as the user types
  (`fuzzy_match_commands`, `fuzzy_score`, `fuzzy_character_match`).
- `mcphost.styles` and `mcphost.theme`: colours that adapt to light or dark
  terminals, text styles, horizontal placement, and markdown rendering
  (`to_markdown`). The default `Theme` uses the Catppuccin palette.
- `mcphost.blocks`: bordered message blocks (`render_content_block`) and the
  `UIMessage` record that every renderer produces.
- `mcphost.messages`: the full-size `MessageRenderer` and the
  `MessageContainer` that lays messages out.
- `mcphost.compact`: `CompactRenderer`, a one-line-per-message layout.
- `mcphost.usage`: `UsageTracker`, which turns token counts into cost from a
  model's per-million-token prices and shows how much of the context window
  is used. With OAuth credentials all costs are reported as zero.
- `mcphost.prompt_input`: `SlashCommandInput`, the prompt with a completion
  popup for slash commands.
- `mcphost.spinner`: `Spinner`, usable as a context manager while waiting.
- `mcphost.progress`: `ProgressReader`, which wraps the line-delimited JSON
  stream of a model pull and draws a progress bar.
- `mcphost.cli`: `CLI`, which ties the pieces together, handles slash
  commands, and gives a `ToolCallbacks` handler for tool calls; `setup_cli`
  builds one from `CLISetupOptions`.

## Examples

Looking up a command by alias:

```python
from mcphost.commands import get_command_by_name

command = get_command_by_name("/h")
print(command.name)         # /help
print(command.description)  # Show available commands and usage information
```

Splitting a `provider:model` string:

```python
from mcphost.cli import parse_model_name

print(parse_model_name("anthropic:claude-3-5-sonnet-20241022"))
# ('anthropic', 'claude-3-5-sonnet-20241022')
print(parse_model_name("no-provider"))
# ('unknown', 'unknown')
```

Rough token estimates (about four characters per token):

```python
from mcphost.usage import estimate_tokens

print(estimate_tokens("a" * 400))  # 100
```

Waiting on work with a spinner:

```python
from mcphost.spinner import Spinner

with Spinner("Thinking..."):
    do_work()
```

## Terminal behaviour

Output is coloured when the terminal supports it. `set_color_enabled` and
`set_dark_background` in `mcphost.styles` override the detection, which is
useful in scripts and tests.