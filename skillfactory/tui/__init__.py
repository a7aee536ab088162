"""Textual TUI for SkillFactory."""
