"""Core scanning machinery: identity, permissions, findings and traversal."""
