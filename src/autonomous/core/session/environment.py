"""Child-process environment for agent sessions."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from autonomous.core.constants import ENV_INSTANCE_ID, ENV_PARENT_PID


def build_child_env(
    base: Mapping[str, str],
    *,
    instance_id: str,
    parent_pid: int,
    strip: Iterable[str] = (),
    overrides: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Return a new environment for the agent process.

    Starts from *base* (normally ``os.environ``, which is never mutated),
    removes the *strip* names so the agent cannot pick up an inherited API
    credential and falls back to its interactive login, applies
    *overrides*, then stamps the instance-identifying variables.
    """
    stripped = set(strip)
    env = {k: v for k, v in base.items() if k not in stripped}
    env["TERM"] = "xterm-256color"
    if overrides:
        env.update(overrides)
    env[ENV_INSTANCE_ID] = instance_id
    env[ENV_PARENT_PID] = str(parent_pid)
    return env
