#!/usr/bin/env python3
import logging
import subprocess
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


class ProcessSpawner:
    """Runs an external program to completion and returns its exit code."""

    def spawn(self, argv: List[str], env: Mapping[str, str], cwd: Optional[str] = None) -> int:
        if not argv:
            return 0
        try:
            result = subprocess.run(argv, env=dict(env), cwd=cwd)
        except FileNotFoundError:
            return COMMAND_NOT_FOUND
        except PermissionError as error:
            logger.debug("cannot execute %s: %s", argv[0], error)
            return COMMAND_NOT_FOUND
        except (OSError, subprocess.SubprocessError) as error:
            logger.warning("spawning %s failed: %s", argv[0], error)
            return COMMAND_NOT_FOUND
        return result.returncode if result.returncode >= 0 else 128 - result.returncode
