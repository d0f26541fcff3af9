"""Core components for fetchkit."""
