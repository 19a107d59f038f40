"""Core building blocks: Todoist client, argument parsing, task lookup, envelopes."""
