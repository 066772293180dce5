"""
Subprocess Environment Utilities
===============================
Helpers for building environment dictionaries for the LLM CLI subprocess.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional


# Prefixes the claude CLI reads for auth and behaviour
_LLM_ENV_PREFIXES = ("ANTHROPIC_", "CLAUDE_", "AWS_", "GOOGLE_", "VERTEX_")


def build_minimal_subprocess_env(
    *,
    sanitize_env: bool = False,
    allowlist: Optional[Iterable[str]] = None,
) -> Dict[str, str]:
    """Return an environment dict suitable for the LLM CLI subprocess.

    When sanitize_env is True, only a small allowlist plus LLM provider
    variables are inherited from the parent environment.

    Args:
        sanitize_env: If False, inherits the full parent env.
        allowlist: Optional extra allowlist keys to include.

    Returns:
        Dict[str, str] to pass as subprocess env.
    """

    base_allowlist = {
        "PATH",
        "HOME",
        "USER",
        "SHELL",
        "TERM",
        "LANG",
        "LC_ALL",
        "LC_CTYPE",
        "TMPDIR",
        "TEMP",
        "TMP",
        "SSL_CERT_FILE",
        "SSL_CERT_DIR",
        "HTTPS_PROXY",
        "HTTP_PROXY",
        "NO_PROXY",
    }

    if allowlist is not None:
        for key in allowlist:
            if isinstance(key, str) and key:
                base_allowlist.add(key)

    env: Dict[str, str] = {}
    parent = os.environ

    for key, value in parent.items():
        if key in base_allowlist or key.startswith(_LLM_ENV_PREFIXES):
            env[key] = value

    if not sanitize_env:
        inherited = dict(parent)
        inherited.update(env)
        return inherited

    return env
