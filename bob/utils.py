"""Shared utility functions for Bob."""


def deep_merge(base: dict, override: dict) -> None:
    """Merge override dict into base dict in-place (recursive)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value


def env_override(section: dict, key: str, env_name: str, environ: dict) -> None:
    """Replace ``section[key]`` with the environment variable when it is set."""
    value = environ.get(env_name)
    if value:
        section[key] = value
