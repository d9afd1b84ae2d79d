[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcphost"
version = "0.1.0"
description = "Terminal chat interface for LLM assistants with MCP tools: message rendering, slash commands, usage tracking and progress display."
requires-python = ">=3.10"
keywords = ["llm", "mcp", "terminal", "chat", "cli", "tui", "assistant"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Topic :: Terminals",
    "Typing :: Typed",
]
dependencies = [
    "rich>=13.0",
    "wcwidth>=0.2.6",
    "prompt-toolkit>=3.0.36",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["mcphost"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
