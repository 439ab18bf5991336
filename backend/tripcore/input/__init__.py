"""tripcore/input — preference inference from history, profile and chat text."""
