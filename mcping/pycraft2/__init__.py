"""Minimal Server List Ping implementation of the Minecraft protocol."""
