"""Shared types for the f1loader package."""

Record = list[str]
Statement = str
