import logging
import os

log = logging.getLogger("storage")


def dir_size_bytes(path: str) -> int:
    total = 0
    for root, _dirs, files in os.walk(path):
        for name in files:
            try:
                total += os.path.getsize(os.path.join(root, name))
            except OSError as exc:
                # file removed while walking
                log.debug("skip %s: %s", name, exc)
    return total


def storage_used_mb(path: str) -> float:
    if not os.path.exists(path):
        return 0.0
    return dir_size_bytes(path) / (1024 * 1024)
