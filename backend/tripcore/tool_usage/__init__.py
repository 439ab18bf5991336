"""tripcore/tool_usage — time and distance primitives (no network calls)."""
